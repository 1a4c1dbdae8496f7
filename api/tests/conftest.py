"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from contribution_analyzer.models.commit import RawCommit  # noqa: E402



def commit_payload(
    sha: str,
    message: str = "update",
    login: str | None = "alice",
    name: str | None = "Alice",
    parents: int = 1,
    avatar_url: str | None = None,
) -> dict:
    """Shape of one item from GET /repos/{owner}/{repo}/commits."""
    return {
        "sha": sha,
        "commit": {"message": message, "author": {"name": name, "email": f"{sha}@example.com"}},
        "author": (
            {"login": login, "avatar_url": avatar_url or f"https://avatars.example.com/{login}"}
            if login
            else None
        ),
        "parents": [{"sha": f"{sha}-p{i}"} for i in range(parents)],
    }


def detail_payload(additions: int = 0, deletions: int = 0, files: list[str] | None = None, login: str | None = None) -> dict:
    """Shape of GET /repos/{owner}/{repo}/commits/{sha}."""
    return {
        "stats": {"additions": additions, "deletions": deletions, "total": additions + deletions},
        "files": [{"filename": f} for f in (files or [])],
        "author": {"login": login, "avatar_url": f"https://avatars.example.com/{login}"} if login else None,
    }


@pytest.fixture
def make_raw_commit():
    def _make(sha: str = "abc", message: str = "update", **kwargs) -> RawCommit:
        detail = kwargs.pop("detail", None)
        commit = RawCommit.from_github(commit_payload(sha, message, **kwargs))
        return commit.with_detail(detail) if detail is not None else commit

    return _make


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
