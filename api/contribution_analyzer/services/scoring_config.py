"""Scoring weights and request defaults, overridable through the environment."""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from contribution_analyzer.models.commit import ChangeType

DEFAULT_TYPE_BONUS: dict[ChangeType, float] = {
    ChangeType.BUGFIX: 3.0,
    ChangeType.FEATURE: 4.0,
    ChangeType.TEST: 2.0,
    ChangeType.REFACTOR: 1.5,
    ChangeType.DOCS: 1.0,
    ChangeType.CHORE: 0.5,
    ChangeType.GENERAL: 0.0,
}


def _env_float(name: str, default: float, env: Mapping[str, str]) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int, env: Mapping[str, str]) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_flag(name: str, default: bool = False, env: Mapping[str, str] | None = None) -> bool:
    source = os.environ if env is None else env
    raw = (source.get(name) or ("1" if default else "")).strip().lower()
    return raw in {"1", "true", "yes", "on"}


class ScoringConfig(BaseModel):
    """Per-commit score constants plus the scoring endpoint defaults."""

    model_config = ConfigDict(frozen=True)

    commit_weight: float = Field(default=5.0, ge=0.0)
    loc_cap: int = Field(default=800, ge=0)
    loc_weight: float = Field(default=2.0, ge=0.0)
    issue_ref_bonus: float = Field(default=1.0, ge=0.0)
    type_bonus: dict[ChangeType, float] = Field(default_factory=lambda: dict(DEFAULT_TYPE_BONUS))

    since_days: int = Field(default=60, ge=1)
    max_commits: int = Field(default=200, ge=1)
    cache_ttl_seconds: float = Field(default=300.0, gt=0.0)

    def bonus_for(self, change_type: ChangeType) -> float:
        return self.type_bonus.get(change_type, 0.0)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ScoringConfig":
        """Build config from SCORING_* / STATS_* variables; malformed values keep defaults."""
        source = os.environ if env is None else env
        defaults = cls()
        ttl = _env_float("STATS_CACHE_TTL_SECONDS", defaults.cache_ttl_seconds, source)
        return cls(
            commit_weight=max(0.0, _env_float("SCORING_COMMIT_WEIGHT", defaults.commit_weight, source)),
            loc_cap=max(0, _env_int("SCORING_LOC_CAP", defaults.loc_cap, source)),
            loc_weight=max(0.0, _env_float("SCORING_LOC_WEIGHT", defaults.loc_weight, source)),
            issue_ref_bonus=max(0.0, _env_float("SCORING_ISSUE_REF_BONUS", defaults.issue_ref_bonus, source)),
            since_days=max(1, _env_int("STATS_SINCE_DAYS", defaults.since_days, source)),
            max_commits=max(1, _env_int("STATS_MAX_COMMITS", defaults.max_commits, source)),
            cache_ttl_seconds=ttl if ttl > 0 else defaults.cache_ttl_seconds,
        )
