from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from ..models import Commit, SampleResult
from ...ports.github_port import PullRequestLookup
from .intervals import (
    DEFAULT_LOOKUP_CONCURRENCY,
    MAX_LEAD_TIME_SECONDS,
    collect_samples,
    interval_sample,
)

logger = logging.getLogger(__name__)


def resolve_work_start(
    commit: Commit,
    pull_requests: Optional[PullRequestLookup],
    *,
    use_first_commit: bool = True,
) -> Optional[datetime]:
    """Find the instant work on a commit started.

    Preference: first commit of the associated PR, then PR creation time,
    then the commit's own timestamp. Lookup errors fall through to the
    commit timestamp.
    """
    if pull_requests is not None and commit.sha:
        try:
            pr = pull_requests.find_pull_request(commit.sha)
        except Exception as e:
            logger.warning("GitHub API error for commit %s: %s", commit.short_sha, e)
            pr = None

        if pr is not None:
            if use_first_commit:
                try:
                    first = pull_requests.first_commit_time(pr)
                except Exception as e:
                    logger.warning("Failed to get PR commits for #%s: %s", pr.number, e)
                    first = None
                if first is not None:
                    logger.info(
                        "Commit %s linked to PR #%s, first commit at %s",
                        commit.short_sha,
                        pr.number,
                        first.isoformat(),
                    )
                    return first

            if pr.created_at is not None:
                logger.info("Commit %s linked to PR #%s, created at %s", commit.short_sha, pr.number, pr.created_at.isoformat())
                return pr.created_at

            logger.info("PR #%s has no usable start time, using commit timestamp", pr.number)
        else:
            logger.info("Commit %s has no associated PR, using commit timestamp", commit.short_sha)

    return commit.committed_at()


def lead_time_sample(
    commit: Commit,
    now: datetime,
    pull_requests: Optional[PullRequestLookup] = None,
    *,
    use_first_commit: bool = True,
) -> SampleResult:
    start = resolve_work_start(commit, pull_requests, use_first_commit=use_first_commit)
    if start is None:
        return SampleResult.skip(commit.short_sha, "no usable timestamp")

    result = interval_sample(commit.short_sha, start, now, MAX_LEAD_TIME_SECONDS)
    if not result.ok:
        logger.warning("Negative lead time detected for commit %s, skipping", commit.short_sha)
    elif result.capped:
        logger.warning("Lead time exceeds 30 days for commit %s, using max value", commit.short_sha)
    else:
        logger.info("Lead time for commit %s: %d minutes", commit.short_sha, round(result.seconds / 60))
    return result


def lead_time_samples(
    commits: Sequence[Commit],
    now: datetime,
    pull_requests: Optional[PullRequestLookup] = None,
    *,
    use_first_commit: bool = True,
    max_workers: int = DEFAULT_LOOKUP_CONCURRENCY,
) -> List[SampleResult]:
    return collect_samples(
        commits,
        lambda commit: lead_time_sample(commit, now, pull_requests, use_first_commit=use_first_commit),
        max_workers=max_workers,
    )
