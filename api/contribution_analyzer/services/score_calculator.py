from __future__ import annotations

import math
import re

from contribution_analyzer.models.commit import ChangeType, RawCommit
from contribution_analyzer.services.scoring_config import ScoringConfig

ISSUE_REF_RE = re.compile(r"#\d+|closes\s+#\d+|fixes\s+#\d+", re.IGNORECASE)

_DEFAULT_CONFIG = ScoringConfig()


def has_issue_reference(message: str | None) -> bool:
    return bool(ISSUE_REF_RE.search(message or ""))


def dampened_loc(additions: int, deletions: int, config: ScoringConfig = _DEFAULT_CONFIG) -> float:
    """Concave size contribution: sqrt of capped lines changed, times loc_weight."""
    loc = max(0, (additions or 0) + (deletions or 0))
    capped = min(loc, config.loc_cap)
    return math.sqrt(capped) * config.loc_weight


def score_commit(
    *,
    additions: int,
    deletions: int,
    change_type: ChangeType,
    has_issue_ref: bool,
    config: ScoringConfig = _DEFAULT_CONFIG,
) -> float:
    """Return base + size contribution + type bonus + optional issue bonus (never negative)."""
    score = config.commit_weight + dampened_loc(additions, deletions, config) + config.bonus_for(change_type)
    if has_issue_ref:
        score += config.issue_ref_bonus
    return max(0.0, score)


def score_raw_commit(
    commit: RawCommit,
    change_type: ChangeType,
    config: ScoringConfig = _DEFAULT_CONFIG,
) -> float:
    return score_commit(
        additions=commit.additions,
        deletions=commit.deletions,
        change_type=change_type,
        has_issue_ref=has_issue_reference(commit.message),
        config=config,
    )
