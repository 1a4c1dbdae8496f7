"""Pydantic models."""

from contribution_analyzer.models.commit import (
    ChangeType,
    CommitAuthor,
    CommitDetail,
    RawCommit,
    ScoredCommit,
)
from contribution_analyzer.models.contributor_score import ContributorScore, ContributorSummary
from contribution_analyzer.models.error import ErrorDetail

__all__ = [
    "ChangeType",
    "CommitAuthor",
    "CommitDetail",
    "RawCommit",
    "ScoredCommit",
    "ContributorScore",
    "ContributorSummary",
    "ErrorDetail",
]
