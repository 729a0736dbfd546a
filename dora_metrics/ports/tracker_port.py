from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class TaskTracker(Protocol):
    """Issue tracker read access. Returns None when the task does not exist."""

    def get_task(self, task_id: str) -> Optional[Mapping[str, Any]]:
        ...
