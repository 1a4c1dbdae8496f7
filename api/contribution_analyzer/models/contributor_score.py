"""Per-contributor scoring response models."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from contribution_analyzer.models.commit import ChangeType


def empty_breakdown() -> dict[str, int]:
    return {change_type.value: 0 for change_type in ChangeType}


class ContributorScore(BaseModel):
    """GET /api/stats/{owner}/{repo} row."""

    model_config = ConfigDict(frozen=True)

    username: str
    avatar: str = ""
    commits: int = Field(ge=0)
    additions: int = Field(ge=0)
    deletions: int = Field(ge=0)
    breakdown: Mapping[str, int] = Field(
        default_factory=empty_breakdown,
        validate_default=True,
        description="Commit count per change type; every type is present",
    )
    score: float = Field(ge=0.0, description="Cumulative score rounded to one decimal")

    @field_validator("breakdown", mode="after")
    @classmethod
    def _freeze_breakdown(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        # Rows are shared through the result cache.
        return MappingProxyType(dict(value))

    @field_serializer("breakdown")
    def _serialize_breakdown(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)

    def to_summary(self) -> "ContributorSummary":
        return ContributorSummary(
            username=self.username,
            avatar=self.avatar,
            commits=self.commits,
            additions=self.additions,
            deletions=self.deletions,
            features=self.breakdown.get(ChangeType.FEATURE.value, 0),
            bugfixes=self.breakdown.get(ChangeType.BUGFIX.value, 0),
            score=self.score,
        )


class ContributorSummary(BaseModel):
    """GET /api/stats/{owner}/{repo}/summary row: feature/bugfix counts only."""

    model_config = ConfigDict(frozen=True)

    username: str
    avatar: str = ""
    commits: int = Field(ge=0)
    additions: int = Field(ge=0)
    deletions: int = Field(ge=0)
    features: int = Field(ge=0)
    bugfixes: int = Field(ge=0)
    score: float = Field(ge=0.0)
