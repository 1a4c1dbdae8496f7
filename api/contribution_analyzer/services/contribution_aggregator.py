"""Fold scored commits into one record per resolved author."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from contribution_analyzer.models.commit import ChangeType, RawCommit, ScoredCommit
from contribution_analyzer.models.contributor_score import ContributorScore

UNKNOWN_AUTHOR = "unknown"


def round_score(score: float) -> float:
    """One decimal, exact halves rounded up (14.25 -> 14.3)."""
    return float(Decimal(score).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def resolve_author_identity(commit: RawCommit) -> str:
    """Account login, then detail login, then git author name, then "unknown"."""
    detail_author = commit.detail.author if commit.detail else None
    for candidate in (
        commit.author.login if commit.author else None,
        detail_author.login if detail_author else None,
        commit.author_name,
    ):
        if candidate:
            return candidate
    return UNKNOWN_AUTHOR


def resolve_avatar(commit: RawCommit) -> str:
    detail_author = commit.detail.author if commit.detail else None
    for candidate in (
        commit.author.avatar_url if commit.author else None,
        detail_author.avatar_url if detail_author else None,
    ):
        if candidate:
            return candidate
    return ""


@dataclass
class ContributorRecord:
    username: str
    avatar: str = ""
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    types: dict[ChangeType, int] = field(default_factory=lambda: {t: 0 for t in ChangeType})
    # Unrounded; rounding happens once in to_score().
    score: float = 0.0

    def add(self, scored: ScoredCommit) -> None:
        commit = scored.commit
        if not self.avatar:
            self.avatar = resolve_avatar(commit)
        self.commits += 1
        self.additions += commit.additions
        self.deletions += commit.deletions
        self.types[scored.change_type] += 1
        self.score += scored.score

    def to_score(self) -> ContributorScore:
        return ContributorScore(
            username=self.username,
            avatar=self.avatar,
            commits=self.commits,
            additions=self.additions,
            deletions=self.deletions,
            breakdown={t.value: count for t, count in self.types.items()},
            score=round_score(self.score),
        )


def aggregate_contributors(scored_commits: Iterable[ScoredCommit]) -> list[ContributorScore]:
    """Return per-author totals sorted by descending score.

    Merge commits are skipped. Ties keep first-seen order.
    """
    by_user: dict[str, ContributorRecord] = {}
    for scored in scored_commits:
        if scored.commit.is_merge:
            continue
        login = resolve_author_identity(scored.commit)
        record = by_user.get(login)
        if record is None:
            record = ContributorRecord(username=login)
            by_user[login] = record
        record.add(scored)

    rows = [record.to_score() for record in by_user.values()]
    return sorted(rows, key=lambda row: row.score, reverse=True)
