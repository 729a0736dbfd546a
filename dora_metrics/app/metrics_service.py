"""Orchestrates one deployment's DORA metrics: compute, encode, push.

Every metric other than the deployment marker is optional. A failure while
computing one of them is logged and leaves that metric out; only a delivery
failure leaves this module, as DeliveryError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..adapters.exporters.backends import MetricsBackend, build_backend
from ..adapters.github.github_client import default_client
from ..domain import catalogue
from ..domain.catalogue import MetricDefinition
from ..domain.detectors import detect_failures
from ..domain.metrics.aggregate import summarize
from ..domain.metrics.cycle_time import cycle_time_samples
from ..domain.metrics.intervals import DEFAULT_LOOKUP_CONCURRENCY
from ..domain.metrics.lead_time import lead_time_samples
from ..domain.metrics.recovery_time import recovery_time_sample
from ..domain.models import (
    Commit,
    DeploymentSnapshot,
    IntervalSummary,
    MetricPoint,
    TagValue,
)
from ..domain.task_refs import any_has_task_id
from ..domain.time_utils import to_unix_nanos, to_unix_seconds
from ..ports.github_port import PullRequestLookup
from ..ports.tracker_port import TaskTracker

logger = logging.getLogger(__name__)

CommitLike = Union[Commit, Mapping[str, Any]]


def as_commit(commit: CommitLike) -> Commit:
    return commit if isinstance(commit, Commit) else Commit.from_payload(commit)


@dataclass(frozen=True)
class DeploymentRequest:
    commits: Tuple[Commit, ...]
    ref: Optional[str]
    project_name: str
    repository: str
    environment: str = "production"
    github_token: Optional[str] = None
    owner: Optional[str] = None

    @classmethod
    def build(
        cls,
        commits: Iterable[CommitLike],
        ref: Optional[str],
        project_name: Optional[str],
        repository: str,
        **kwargs,
    ) -> "DeploymentRequest":
        return cls(
            commits=tuple(as_commit(c) for c in (commits or ())),
            ref=ref,
            project_name=project_name or repository,
            repository=repository,
            **kwargs,
        )


class MetricsService:
    def __init__(
        self,
        backend: Optional[MetricsBackend] = None,
        *,
        tracker: Optional[TaskTracker] = None,
        pull_requests: Optional[PullRequestLookup] = None,
        max_workers: int = DEFAULT_LOOKUP_CONCURRENCY,
        use_first_commit: bool = True,
        http_timeout: float = 30.0,
    ):
        self.backend = backend
        self.tracker = tracker
        self.pull_requests = pull_requests
        self.max_workers = max_workers
        self.use_first_commit = use_first_commit
        self.http_timeout = http_timeout

    def common_tags(self, request: DeploymentRequest, has_task: bool) -> Dict[str, TagValue]:
        return {
            "project": request.project_name,
            "repository": request.repository,
            "environment": request.environment,
            "has_task": has_task,
        }

    def collect(self, request: DeploymentRequest, now: datetime) -> DeploymentSnapshot:
        """Compute every emittable metric for the deployment at instant now."""
        timestamp = to_unix_nanos(now)
        has_task = any_has_task_id(commit.message for commit in request.commits)
        tags = self.common_tags(request, has_task)

        points: List[MetricPoint] = [_marker(catalogue.DEPLOYMENT, tags, timestamp)]
        summaries: Dict[str, IntervalSummary] = {}
        logger.info("Recorded deployment for %s in %s", request.project_name, request.environment)

        try:
            lead = self._lead_time(request, now)
            if lead is not None:
                summaries[catalogue.LEAD_TIME.measurement] = lead
                if lead.has_data:
                    points.append(_interval(catalogue.LEAD_TIME, tags, lead.mean_seconds, timestamp))
                    logger.info(
                        "Average lead time for this deployment: %d minutes (%d commits)",
                        round(lead.mean_seconds / 60),
                        lead.count,
                    )
        except Exception as e:
            logger.warning("Failed to calculate lead times: %s", e)

        if self.tracker is not None:
            try:
                cycle = summarize(
                    cycle_time_samples(request.commits, now, self.tracker, max_workers=self.max_workers)
                )
                summaries[catalogue.CYCLE_TIME.measurement] = cycle
                if cycle.has_data:
                    points.append(_interval(catalogue.CYCLE_TIME, tags, cycle.mean_seconds, timestamp))
                    logger.info(
                        "Average cycle time for this deployment: %d days (%d tasks)",
                        round(cycle.mean_seconds / 86400),
                        cycle.count,
                    )
            except Exception as e:
                logger.warning("Failed to calculate cycle times: %s", e)

        if detect_failures(request.commits, request.ref):
            points.append(_marker(catalogue.DEPLOYMENT_FAILURE, tags, timestamp))
            logger.info("Detected deployment failure (revert or hotfix detected)")

        incident_type = None
        try:
            sample, incident_type = recovery_time_sample(request.commits, request.ref, now)
            if sample is not None:
                recovery = summarize([sample])
                summaries[catalogue.RECOVERY_TIME.measurement] = recovery
                if recovery.has_data:
                    mttr_tags = {**tags, "incident_type": incident_type}
                    points.append(_interval(catalogue.RECOVERY_TIME, mttr_tags, recovery.mean_seconds, timestamp))
        except Exception as e:
            logger.warning("Failed to calculate MTTR: %s", e)

        return DeploymentSnapshot(
            deployed_at=now,
            tags=tags,
            has_task=has_task,
            points=tuple(points),
            summaries=summaries,
            incident_type=incident_type,
        )

    def record_and_push(
        self,
        request: DeploymentRequest,
        now: Optional[datetime] = None,
    ) -> Optional[DeploymentSnapshot]:
        if not request.commits:
            logger.info("No commits to process for metrics")
            return None
        if self.backend is None:
            raise ValueError("A metrics backend is required to push metrics")

        now = now or datetime.now(UTC)
        snapshot = self.collect(request, now)
        self.backend.publish(snapshot.points, grouping_key(request, now))
        return snapshot

    def _lead_time(self, request: DeploymentRequest, now: datetime) -> Optional[IntervalSummary]:
        if not request.github_token:
            logger.warning("GitHub token not provided, skipping lead time calculation")
            return None

        lookup = self.pull_requests
        if lookup is None:
            try:
                lookup = default_client(
                    request.github_token,
                    f"{request.owner or ''}/{request.repository}",
                    timeout=self.http_timeout,
                )
            except RuntimeError as e:
                logger.warning("Cannot look up pull requests (%s), using commit timestamps", e)

        return summarize(
            lead_time_samples(
                request.commits,
                now,
                lookup,
                use_first_commit=self.use_first_commit,
                max_workers=self.max_workers,
            )
        )


def _marker(definition: MetricDefinition, tags: Mapping[str, TagValue], timestamp: int) -> MetricPoint:
    return MetricPoint(definition.measurement, tags, {definition.field: 1}, timestamp)


def _interval(
    definition: MetricDefinition,
    tags: Mapping[str, TagValue],
    seconds: float,
    timestamp: int,
) -> MetricPoint:
    return MetricPoint(definition.measurement, tags, {definition.field: float(seconds)}, timestamp)


def grouping_key(request: DeploymentRequest, now: datetime) -> Dict[str, str]:
    """Pushgateway grouping labels; deployment_id keeps each deployment's series."""
    return {
        "project": request.project_name,
        "repository": request.repository,
        "environment": request.environment,
        "deployment_id": str(to_unix_seconds(now)),
    }


def record_and_push_metrics(
    commits: Iterable[CommitLike],
    ref: Optional[str],
    project_name: Optional[str],
    repository: str,
    backend_url: str,
    *,
    environment: str = "production",
    job_name: str = "dora_metrics",
    bucket: str = "default",
    github_token: Optional[str] = None,
    tracker_client: Optional[TaskTracker] = None,
    backend: str = "pushgateway",
    owner: Optional[str] = None,
    pull_requests: Optional[PullRequestLookup] = None,
    lookup_concurrency: int = DEFAULT_LOOKUP_CONCURRENCY,
    timeout: float = 30.0,
    now: Optional[datetime] = None,
) -> Optional[DeploymentSnapshot]:
    """Compute this deployment's DORA metrics and push them to the backend.

    Returns the snapshot that was pushed, or None when there were no
    commits. Raises DeliveryError when every push attempt failed.
    """
    request = DeploymentRequest.build(
        commits,
        ref,
        project_name,
        repository,
        environment=environment or "production",
        github_token=github_token,
        owner=owner,
    )
    service = MetricsService(
        build_backend(backend, backend_url, job_name=job_name, bucket=bucket, timeout=timeout),
        tracker=tracker_client,
        pull_requests=pull_requests,
        max_workers=lookup_concurrency,
        http_timeout=timeout,
    )
    return service.record_and_push(request, now=now)
