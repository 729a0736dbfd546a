from __future__ import annotations

from typing import Iterable, List, Optional

from ..models import IntervalSummary, SampleResult


def mean(values: Iterable[float]) -> Optional[float]:
    values = list(values)
    if not values:
        return None
    return sum(values) / len(values)


def summarize(results: Iterable[SampleResult]) -> IntervalSummary:
    """Reduce per-commit samples to one representative value.

    mean_seconds is None when nothing survived; skipped tells "all data
    filtered" apart from "no data".
    """
    values: List[float] = []
    skipped = 0
    capped = 0
    for result in results:
        if not result.ok:
            skipped += 1
            continue
        if result.capped:
            capped += 1
        values.append(result.seconds)

    return IntervalSummary(
        count=len(values),
        skipped=skipped,
        capped=capped,
        mean_seconds=mean(values),
    )
