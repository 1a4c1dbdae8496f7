"""Contributor scoring pipeline: fetch -> detail -> classify -> score -> aggregate -> cache.

Results are memoized per (owner, repo, since_days, max_commits). Identical
requests racing on a cold key both recompute; the later write wins.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Iterator, Optional, Protocol

from contribution_analyzer.adapters.result_cache import InMemoryResultCache, ResultCache
from contribution_analyzer.models.commit import CommitDetail, RawCommit, ScoredCommit
from contribution_analyzer.models.contributor_score import ContributorScore
from contribution_analyzer.services.commit_classifier import classify_commit
from contribution_analyzer.services.contribution_aggregator import aggregate_contributors
from contribution_analyzer.services.github_client import GitHubClient, GitHubClientError
from contribution_analyzer.services.score_calculator import score_raw_commit
from contribution_analyzer.services.scoring_config import ScoringConfig

PAGE_SIZE = 100
log = logging.getLogger(__name__)

CacheKey = tuple[str, str, int, int]


class CommitSource(Protocol):
    """Subset of GitHubClient the pipeline needs."""

    def list_commits(
        self,
        owner: str,
        repo: str,
        since_iso_utc: Optional[str] = None,
        per_page: int = PAGE_SIZE,
        limit: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> list[dict]:
        ...

    def get_commit(self, owner: str, repo: str, sha: str) -> dict:
        ...


class CommitDetailFetcher(Protocol):
    """Attaches diff stats and file lists to commits."""

    def fetch_details(self, owner: str, repo: str, commits: Iterable[RawCommit]) -> Iterator[RawCommit]:
        ...


class SequentialDetailFetcher:
    """One detail request at a time, keeping outbound load flat against the rate limit."""

    def __init__(self, source: CommitSource) -> None:
        self._source = source

    def fetch_details(self, owner: str, repo: str, commits: Iterable[RawCommit]) -> Iterator[RawCommit]:
        for commit in commits:
            payload = self._source.get_commit(owner, repo, commit.sha)
            yield commit.with_detail(CommitDetail.from_github(payload))


def since_iso_utc(since_days: int, now: Optional[datetime] = None) -> str:
    current = now or datetime.now(timezone.utc)
    cutoff = current.astimezone(timezone.utc) - timedelta(days=since_days)
    return cutoff.strftime("%Y-%m-%dT%H:%M:%SZ")


def score_commits(commits: Iterable[RawCommit], config: ScoringConfig) -> list[ScoredCommit]:
    scored: list[ScoredCommit] = []
    for commit in commits:
        change_type = classify_commit(commit.message, commit.files)
        scored.append(
            ScoredCommit(commit=commit, change_type=change_type, score=score_raw_commit(commit, change_type, config))
        )
    return scored


class ContributionStatsService:
    def __init__(
        self,
        source: CommitSource,
        cache: Optional[ResultCache] = None,
        config: Optional[ScoringConfig] = None,
        detail_fetcher: Optional[CommitDetailFetcher] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.config = config or ScoringConfig()
        self.source = source
        self.cache: ResultCache = cache if cache is not None else InMemoryResultCache(self.config.cache_ttl_seconds)
        self.detail_fetcher = detail_fetcher or SequentialDetailFetcher(source)
        self._now = now

    @classmethod
    def from_env(cls, source: Optional[CommitSource] = None) -> "ContributionStatsService":
        config = ScoringConfig.from_env()
        return cls(
            source=source or GitHubClient(),
            cache=InMemoryResultCache(default_ttl_seconds=config.cache_ttl_seconds),
            config=config,
        )

    def fetch_commits(self, owner: str, repo: str, since_days: int, max_commits: int) -> list[RawCommit]:
        """Paginate the commit list, truncate to max_commits, drop merges."""
        payloads = self.source.list_commits(
            owner,
            repo,
            since_iso_utc=since_iso_utc(since_days, self._now()),
            per_page=PAGE_SIZE,
            limit=max_commits,
        )
        commits = [RawCommit.from_github(p) for p in payloads[:max_commits] if isinstance(p, dict)]
        return [c for c in commits if not c.is_merge]

    def compute_contributor_stats(
        self, owner: str, repo: str, since_days: int, max_commits: int
    ) -> list[ContributorScore]:
        commits = self.fetch_commits(owner, repo, since_days, max_commits)
        if not commits:
            return []
        detailed = list(self.detail_fetcher.fetch_details(owner, repo, commits))
        return aggregate_contributors(score_commits(detailed, self.config))

    def get_contributor_stats(
        self,
        owner: str,
        repo: str,
        since_days: Optional[int] = None,
        max_commits: Optional[int] = None,
    ) -> tuple[ContributorScore, ...]:
        """Return cached or freshly computed per-contributor scores, highest first.

        Raises GitHubClientError on any upstream failure; nothing is cached then.
        """
        since_days = self.config.since_days if since_days is None else since_days
        max_commits = self.config.max_commits if max_commits is None else max_commits
        key: CacheKey = (owner, repo, since_days, max_commits)

        cached = self.cache.get(key)
        if cached is not None:
            log.info("stats_cache_hit owner=%s repo=%s since_days=%s max_commits=%s", *key)
            return cached

        start = time.perf_counter()
        try:
            rows = self.compute_contributor_stats(owner, repo, since_days, max_commits)
        except GitHubClientError as exc:
            log.warning(
                "stats_compute_failed owner=%s repo=%s status=%s error=%s",
                owner,
                repo,
                exc.status_code,
                exc,
            )
            raise

        result = tuple(rows)
        self.cache.set(key, result, ttl_seconds=self.config.cache_ttl_seconds)
        log.info(
            "stats_computed owner=%s repo=%s since_days=%s max_commits=%s contributors=%s elapsed_ms=%.2f",
            owner,
            repo,
            since_days,
            max_commits,
            len(result),
            (time.perf_counter() - start) * 1000.0,
        )
        return result
