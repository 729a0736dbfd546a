from .domain.detectors import (
    detect_failures,
    deployment_incident_type,
    extract_incident_type,
    is_hotfix_deployment,
    is_revert_commit,
)
from .domain.task_refs import extract_task_id, has_task_id
from .domain.models import Commit, DeploymentSnapshot, MetricPoint, PullRequestInfo, SampleResult
from .domain.metrics.intervals import MAX_CYCLE_TIME_DAYS, MAX_LEAD_TIME_DAYS, interval_sample
from .domain.metrics.aggregate import mean, summarize
from .domain.metrics.lead_time import lead_time_samples
from .domain.metrics.cycle_time import cycle_time_samples
from .domain.metrics.recovery_time import recovery_time_sample
from .adapters.exporters.line_protocol import LineProtocolEncoder, create_line_protocol
from .adapters.exporters.prometheus.prometheus_exporter import DoraMetricsExporter
from .adapters.exporters.delivery import RETRY_ATTEMPTS, RETRY_DELAY_SECONDS, DeliveryChannel
from .adapters.exporters.backends import build_backend
from .app.metrics_service import DeploymentRequest, MetricsService, record_and_push_metrics
from .errors import DeliveryError, DoraMetricsError, PushError

__all__ = [
    "detect_failures",
    "deployment_incident_type",
    "extract_incident_type",
    "is_hotfix_deployment",
    "is_revert_commit",
    "extract_task_id",
    "has_task_id",
    "Commit",
    "DeploymentSnapshot",
    "MetricPoint",
    "PullRequestInfo",
    "SampleResult",
    "MAX_CYCLE_TIME_DAYS",
    "MAX_LEAD_TIME_DAYS",
    "interval_sample",
    "mean",
    "summarize",
    "lead_time_samples",
    "cycle_time_samples",
    "recovery_time_sample",
    "LineProtocolEncoder",
    "create_line_protocol",
    "DoraMetricsExporter",
    "RETRY_ATTEMPTS",
    "RETRY_DELAY_SECONDS",
    "DeliveryChannel",
    "build_backend",
    "DeploymentRequest",
    "MetricsService",
    "record_and_push_metrics",
    "DeliveryError",
    "DoraMetricsError",
    "PushError",
]
