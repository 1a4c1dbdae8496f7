"""Contributor scoring routes used by the dashboard."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from contribution_analyzer.models.contributor_score import ContributorScore, ContributorSummary
from contribution_analyzer.models.error import ErrorDetail
from contribution_analyzer.services.contribution_stats_service import ContributionStatsService
from contribution_analyzer.services.github_client import GitHubClientError

router = APIRouter()

_UPSTREAM_ERRORS = {
    403: {"model": ErrorDetail},
    404: {"model": ErrorDetail},
    500: {"model": ErrorDetail},
}


def get_stats_service(request: Request) -> ContributionStatsService:
    return request.app.state.stats_service


def _load_scores(
    service: ContributionStatsService,
    owner: str,
    repo: str,
    since_days: Optional[int],
    max_commits: Optional[int],
) -> tuple[ContributorScore, ...]:
    try:
        return service.get_contributor_stats(owner, repo, since_days=since_days, max_commits=max_commits)
    except GitHubClientError as exc:
        raise HTTPException(status_code=exc.status_code or 500, detail=str(exc)) from exc


@router.get(
    "/stats/{owner}/{repo}",
    response_model=list[ContributorScore],
    responses=_UPSTREAM_ERRORS,
)
def get_contributor_stats(
    owner: str,
    repo: str,
    since_days: Optional[int] = Query(None, alias="sinceDays", ge=1, description="Lookback window in days."),
    max_commits: Optional[int] = Query(None, alias="maxCommits", ge=1, description="Max commits to analyze."),
    service: ContributionStatsService = Depends(get_stats_service),
) -> list[ContributorScore]:
    """Per-contributor scores with full change-type breakdown, highest score first."""
    return list(_load_scores(service, owner, repo, since_days, max_commits))


@router.get(
    "/stats/{owner}/{repo}/summary",
    response_model=list[ContributorSummary],
    responses=_UPSTREAM_ERRORS,
)
def get_contributor_summary(
    owner: str,
    repo: str,
    since_days: Optional[int] = Query(None, alias="sinceDays", ge=1),
    max_commits: Optional[int] = Query(None, alias="maxCommits", ge=1),
    service: ContributionStatsService = Depends(get_stats_service),
) -> list[ContributorSummary]:
    """Same scores projected to feature/bugfix counts (shares the cache entry)."""
    return [row.to_summary() for row in _load_scores(service, owner, repo, since_days, max_commits)]
