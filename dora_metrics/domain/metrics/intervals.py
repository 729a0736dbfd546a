from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..models import Commit, SampleResult

logger = logging.getLogger(__name__)

DAY_SECONDS = 24 * 60 * 60
MAX_LEAD_TIME_DAYS = 30
MAX_CYCLE_TIME_DAYS = 180
MAX_LEAD_TIME_SECONDS = MAX_LEAD_TIME_DAYS * DAY_SECONDS
MAX_CYCLE_TIME_SECONDS = MAX_CYCLE_TIME_DAYS * DAY_SECONDS

DEFAULT_LOOKUP_CONCURRENCY = 5


def interval_sample(
    source: str,
    start: datetime,
    now: datetime,
    ceiling_seconds: Optional[float] = None,
) -> SampleResult:
    """Seconds from start to now.

    Non-positive durations (clock skew, future-dated data) are skipped.
    Durations above the ceiling are clamped to it.
    """
    seconds = (now - start) / timedelta(seconds=1)
    if seconds <= 0:
        return SampleResult.skip(source, f"non-positive interval ({seconds:.0f}s)")
    if ceiling_seconds is not None and seconds > ceiling_seconds:
        return SampleResult.value(source, ceiling_seconds, capped=True)
    return SampleResult.value(source, seconds)


def collect_samples(
    commits: Sequence[Commit],
    compute: Callable[[Commit], Optional[SampleResult]],
    *,
    max_workers: int = DEFAULT_LOOKUP_CONCURRENCY,
) -> List[SampleResult]:
    """Run compute for every commit on a bounded thread pool.

    compute may return None to leave a commit out entirely. An exception
    from one commit becomes a skip for that commit only.
    """
    if not commits:
        return []

    results: List[SampleResult] = []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {executor.submit(compute, commit): commit for commit in commits}

        for future in as_completed(futures):
            commit = futures[future]
            try:
                result = future.result()
            except Exception as e:
                logger.warning("Skipping commit %s due to error: %s", commit.short_sha, e)
                result = SampleResult.skip(commit.short_sha, str(e))

            if result is not None:
                results.append(result)

    return results
