from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from ..models import Commit, SampleResult
from ..task_refs import extract_task_id
from ..time_utils import parse_timestamp
from ...ports.tracker_port import TaskTracker
from .intervals import (
    DEFAULT_LOOKUP_CONCURRENCY,
    MAX_CYCLE_TIME_SECONDS,
    collect_samples,
    interval_sample,
)

logger = logging.getLogger(__name__)

# Trackers disagree on where the creation time lives; tried in order.
TASK_CREATED_FIELDS = ("timestamp", "created", "createdAt")


def task_created_at(task: Mapping[str, Any]) -> Optional[datetime]:
    """Creation instant of a tracker task, or None if absent or unparseable."""
    for name in TASK_CREATED_FIELDS:
        raw = task.get(name)
        if raw is None or raw == "":
            continue
        try:
            return parse_timestamp(raw)
        except (TypeError, ValueError, OverflowError):
            return None
    return None


def cycle_time_sample(
    commit: Commit,
    now: datetime,
    tracker: TaskTracker,
) -> Optional[SampleResult]:
    """Cycle time for one commit; None when the commit names no task."""
    task_id = extract_task_id(commit.message)
    if task_id is None:
        return None

    try:
        task = tracker.get_task(task_id)
    except Exception as e:
        logger.warning("Failed to fetch task %s for commit %s: %s", task_id, commit.short_sha, e)
        return SampleResult.skip(task_id, f"tracker error: {e}")

    if not task:
        logger.warning("Task %s not found in tracker", task_id)
        return SampleResult.skip(task_id, "task not found")

    created_at = task_created_at(task)
    if created_at is None:
        logger.warning("Invalid timestamp for task %s, skipping cycle time", task_id)
        return SampleResult.skip(task_id, "invalid creation timestamp")

    result = interval_sample(task_id, created_at, now, MAX_CYCLE_TIME_SECONDS)
    if not result.ok:
        logger.warning("Negative cycle time detected for task %s, skipping", task_id)
    elif result.capped:
        logger.warning("Cycle time exceeds 180 days for task %s, using max value", task_id)
    else:
        logger.info("Cycle time for task %s: %d days", task_id, round(result.seconds / 86400))
    return result


def cycle_time_samples(
    commits: Sequence[Commit],
    now: datetime,
    tracker: TaskTracker,
    *,
    max_workers: int = DEFAULT_LOOKUP_CONCURRENCY,
) -> List[SampleResult]:
    return collect_samples(
        commits,
        lambda commit: cycle_time_sample(commit, now, tracker),
        max_workers=max_workers,
    )
