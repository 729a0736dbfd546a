from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence, Tuple

from ..detectors import deployment_incident_type
from ..models import Commit, SampleResult
from .intervals import interval_sample

logger = logging.getLogger(__name__)


def incident_start(commits: Sequence[Commit]) -> Optional[datetime]:
    """Earliest commit time in the deployment."""
    times = [t for t in (commit.committed_at() for commit in commits) if t is not None]
    return min(times) if times else None


def recovery_time_sample(
    commits: Sequence[Commit],
    ref: Optional[str],
    now: datetime,
) -> Tuple[Optional[SampleResult], Optional[str]]:
    """Time to recover for an incident deployment.

    Returns (sample, incident_type). Both are None for deployments that are
    not incidents; the sample is a skip when no positive interval exists.
    """
    incident_type = deployment_incident_type(commits, ref)
    if incident_type is None:
        return None, None

    start = incident_start(commits)
    if start is None:
        return SampleResult.skip("deployment", "no commit timestamps"), incident_type

    result = interval_sample("deployment", start, now)
    if result.ok:
        logger.info("MTTR for %s incident: %d minutes", incident_type, round(result.seconds / 60))
    return result, incident_type
