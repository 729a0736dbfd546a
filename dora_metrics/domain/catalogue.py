"""Names and help texts of every metric the engine emits.

Each entry carries both encodings' names so a snapshot can be rendered as
InfluxDB line protocol or as Prometheus text exposition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

MARKER = "marker"
GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDefinition:
    measurement: str
    series: str
    help: str
    kind: str = GAUGE
    field: str = "seconds"

    @property
    def is_marker(self) -> bool:
        return self.kind == MARKER


DEPLOYMENT = MetricDefinition(
    "deployment",
    "deployment_created_seconds",
    "Timestamp of the deployment. Use changes() to count deployments.",
    kind=MARKER,
    field="count",
)
LEAD_TIME = MetricDefinition(
    "lead_time",
    "deployment_lead_time_seconds",
    "Mean lead time from commit to deployment in seconds",
)
CYCLE_TIME = MetricDefinition(
    "cycle_time",
    "cycle_time_seconds",
    "Mean cycle time from task creation to deployment in seconds",
)
DEPLOYMENT_FAILURE = MetricDefinition(
    "deployment_failure",
    "deployment_failure_created_seconds",
    "Timestamp of the failed deployment. Use changes() to count failures.",
    kind=MARKER,
    field="count",
)
RECOVERY_TIME = MetricDefinition(
    "mttr",
    "incident_recovery_time_seconds",
    "Time to recover from incidents in seconds",
)

CATALOGUE: Dict[str, MetricDefinition] = {
    definition.measurement: definition
    for definition in (DEPLOYMENT, LEAD_TIME, CYCLE_TIME, DEPLOYMENT_FAILURE, RECOVERY_TIME)
}


def lookup(measurement: str) -> Optional[MetricDefinition]:
    return CATALOGUE.get(measurement)
