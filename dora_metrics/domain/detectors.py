"""Incident detection for deployments.

A deployment counts as a failure (and as an incident for MTTR) when one of
its commits reverts earlier work or when it is shipped from a hotfix-style
branch. Pattern matching only, no I/O.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from .models import Commit

REVERT = "revert"
HOTFIX = "hotfix"

_REVERT_PATTERNS = [
    re.compile(r"^revert[(:\s]", re.IGNORECASE),  # revert(TECH-1):, revert:, revert ...
    re.compile(r'^Revert\s+"'),  # git revert default message
    re.compile(r"\brevert\s+commit\b", re.IGNORECASE),
    re.compile(r"\brollback\b", re.IGNORECASE),
]

_HOTFIX_REF_MARKERS = ("hotfix/", "hotfix-", "fix-", "fix/", "emergency/")


def is_revert_commit(message: Optional[str]) -> bool:
    if not message:
        return False
    return any(pattern.search(message) for pattern in _REVERT_PATTERNS)


def is_hotfix_deployment(ref: Optional[str]) -> bool:
    if not ref:
        return False
    return any(marker in ref for marker in _HOTFIX_REF_MARKERS)


def extract_incident_type(message: Optional[str], ref: Optional[str]) -> Optional[str]:
    """Classify a single message/ref pair. Revert wins over hotfix."""
    if is_revert_commit(message):
        return REVERT
    if is_hotfix_deployment(ref):
        return HOTFIX
    return None


def deployment_incident_type(commits: Iterable[Commit], ref: Optional[str]) -> Optional[str]:
    """Classify a whole deployment.

    Commit messages are checked for reverts first; only when none is found
    does the ref decide whether this was a hotfix.
    """
    if any(is_revert_commit(commit.message) for commit in commits):
        return REVERT
    if is_hotfix_deployment(ref):
        return HOTFIX
    return None


def detect_failures(commits: Iterable[Commit], ref: Optional[str]) -> bool:
    return deployment_incident_type(commits, ref) is not None
