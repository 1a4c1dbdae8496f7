"""Commit models parsed from GitHub REST payloads.

List and detail endpoints return loosely shaped JSON where any identity field
may be null (deleted accounts, unlinked emails). Every optional field here has
an explicit default so downstream classification and scoring never need to
inspect raw dicts.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChangeType(str, Enum):
    BUGFIX = "bugfix"
    FEATURE = "feature"
    TEST = "test"
    REFACTOR = "refactor"
    DOCS = "docs"
    CHORE = "chore"
    GENERAL = "general"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]


_PRECEDENCE: dict[ChangeType, int] = {
    ChangeType.BUGFIX: 6,
    ChangeType.FEATURE: 5,
    ChangeType.TEST: 4,
    ChangeType.REFACTOR: 3,
    ChangeType.DOCS: 2,
    ChangeType.CHORE: 1,
    ChangeType.GENERAL: 0,
}


def _dict_or_empty(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


class CommitAuthor(BaseModel):
    """GitHub account linked to a commit (``author`` on list/detail payloads)."""

    model_config = ConfigDict(frozen=True)

    login: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_github(cls, payload: Any) -> Optional["CommitAuthor"]:
        if not isinstance(payload, dict):
            return None
        return cls(login=payload.get("login") or None, avatar_url=payload.get("avatar_url") or None)


class CommitDetail(BaseModel):
    """Diff stats and changed files from ``GET /repos/{owner}/{repo}/commits/{sha}``."""

    model_config = ConfigDict(frozen=True)

    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    files: tuple[str, ...] = ()
    author: Optional[CommitAuthor] = None

    @classmethod
    def from_github(cls, payload: Any) -> "CommitDetail":
        data = _dict_or_empty(payload)
        stats = _dict_or_empty(data.get("stats"))
        files = data.get("files") if isinstance(data.get("files"), list) else []
        return cls(
            additions=max(0, int(stats.get("additions") or 0)),
            deletions=max(0, int(stats.get("deletions") or 0)),
            files=tuple(str(f.get("filename") or "") for f in files if isinstance(f, dict)),
            author=CommitAuthor.from_github(data.get("author")),
        )


class RawCommit(BaseModel):
    """One entry of ``GET /repos/{owner}/{repo}/commits``, optionally with its detail."""

    model_config = ConfigDict(frozen=True)

    sha: str
    message: str = ""
    author: Optional[CommitAuthor] = None
    author_name: Optional[str] = None
    parent_count: int = Field(default=0, ge=0)
    detail: Optional[CommitDetail] = None

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1

    @property
    def additions(self) -> int:
        return self.detail.additions if self.detail else 0

    @property
    def deletions(self) -> int:
        return self.detail.deletions if self.detail else 0

    @property
    def files(self) -> tuple[str, ...]:
        return self.detail.files if self.detail else ()

    def with_detail(self, detail: CommitDetail) -> "RawCommit":
        return self.model_copy(update={"detail": detail})

    @classmethod
    def from_github(cls, payload: dict) -> "RawCommit":
        commit = _dict_or_empty(payload.get("commit"))
        git_author = _dict_or_empty(commit.get("author"))
        parents = payload.get("parents")
        return cls(
            sha=str(payload.get("sha") or ""),
            message=str(commit.get("message") or ""),
            author=CommitAuthor.from_github(payload.get("author")),
            author_name=git_author.get("name") or None,
            parent_count=len(parents) if isinstance(parents, list) else 0,
        )


class ScoredCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    commit: RawCommit
    change_type: ChangeType
    score: float = Field(ge=0.0)
