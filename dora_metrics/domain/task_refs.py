from __future__ import annotations

import re
from typing import Iterable, Optional

# Task identifiers look like TECH-123.
TASK_ID_PATTERN = re.compile(r"([A-Z]+-\d+)")


def extract_task_id(message: Optional[str]) -> Optional[str]:
    """Return the first task identifier found in a commit message."""
    if not message:
        return None
    match = TASK_ID_PATTERN.search(message)
    return match.group(1) if match else None


def has_task_id(message: Optional[str]) -> bool:
    return extract_task_id(message) is not None


def any_has_task_id(messages: Iterable[Optional[str]]) -> bool:
    return any(has_task_id(message) for message in messages)
