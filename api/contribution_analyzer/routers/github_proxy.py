"""Thin GitHub passthroughs for the dashboard's contributor and commit lists."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from contribution_analyzer.models.error import ErrorDetail
from contribution_analyzer.services.github_client import GitHubClient, GitHubClientError

router = APIRouter()


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github_client


@router.get("/contributors/{owner}/{repo}", responses={404: {"model": ErrorDetail}})
def list_contributors(owner: str, repo: str, client: GitHubClient = Depends(get_github_client)) -> list[dict]:
    """First page of GitHub's contributor list, unmodified."""
    try:
        return client.list_contributors(owner, repo, per_page=100, max_pages=1)
    except GitHubClientError as exc:
        raise HTTPException(status_code=exc.status_code or 500, detail=str(exc)) from exc


@router.get("/commits/{owner}/{repo}", responses={404: {"model": ErrorDetail}})
def list_commits(owner: str, repo: str, client: GitHubClient = Depends(get_github_client)) -> list[dict]:
    """Latest 100 commits, unmodified."""
    try:
        return client.list_commits(owner, repo, per_page=100, max_pages=1)
    except GitHubClientError as exc:
        raise HTTPException(status_code=exc.status_code or 500, detail=str(exc)) from exc
