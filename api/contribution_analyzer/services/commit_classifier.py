"""Commit change-type classification from message keywords and changed paths.

Two independent labels are computed; the message label wins unless the
file-derived label has strictly higher precedence.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from contribution_analyzer.models.commit import ChangeType

# Order matters: first match wins, bugfix first.
_MESSAGE_RULES: list[tuple[ChangeType, re.Pattern[str]]] = [
    (ChangeType.BUGFIX, re.compile(r"fix|bug|patch|resolve")),
    (ChangeType.FEATURE, re.compile(r"feat|feature|add|implement")),
    (ChangeType.REFACTOR, re.compile(r"refactor|cleanup")),
    (ChangeType.DOCS, re.compile(r"docs?|readme")),
    (ChangeType.TEST, re.compile(r"test|spec|jest|cypress")),
    (ChangeType.CHORE, re.compile(r"chore|bump|deps|ci|build")),
]

_FILE_RULES: list[tuple[ChangeType, tuple[re.Pattern[str], ...]]] = [
    (
        ChangeType.DOCS,
        (
            re.compile(r"(^|/)docs?/"),
            re.compile(r"readme|\.mdx?$|\.rst$|\.txt$"),
        ),
    ),
    (ChangeType.TEST, (re.compile(r"__tests__|(^|/)tests?/|\.test\.|\.spec\."),)),
    (ChangeType.FEATURE, (re.compile(r"(^|/)(src|app|lib|components|pages)/"),)),
    (
        ChangeType.CHORE,
        (
            re.compile(
                r"(^|/)\.github/|package(-lock)?\.json$|\.lock$|-lock\.ya?ml$|\.rc$|config|tsconfig\.json$"
            ),
        ),
    ),
]


def classify_by_message(message: Optional[str]) -> ChangeType:
    text = (message or "").lower()
    for change_type, pattern in _MESSAGE_RULES:
        if pattern.search(text):
            return change_type
    return ChangeType.GENERAL


def classify_by_files(files: Optional[Iterable[str]]) -> ChangeType:
    paths = [(path or "").lower() for path in (files or ())]
    if not paths:
        return ChangeType.GENERAL
    for change_type, patterns in _FILE_RULES:
        if any(pattern.search(path) for pattern in patterns for path in paths):
            return change_type
    return ChangeType.GENERAL


def resolve_change_type(message_type: ChangeType, file_type: ChangeType) -> ChangeType:
    if file_type.precedence > message_type.precedence:
        return file_type
    return message_type


def classify_commit(message: Optional[str], files: Optional[Iterable[str]] = None) -> ChangeType:
    """Return exactly one change type for a commit.

    Missing file data degrades to the message label, since the file rule then
    yields ``general`` which never outranks anything.
    """
    return resolve_change_type(classify_by_message(message), classify_by_files(files))
