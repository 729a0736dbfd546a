from __future__ import annotations

from typing import Dict, Iterable, Tuple

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from ....domain.catalogue import MetricDefinition, lookup
from ....domain.models import MetricPoint, TagValue


def _label_value(value: TagValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _definition_for(point: MetricPoint) -> MetricDefinition:
    definition = lookup(point.measurement)
    if definition is None:
        raise KeyError(f"No exposition series for measurement {point.measurement!r}")
    return definition


def gauge_value(point: MetricPoint, definition: MetricDefinition) -> float:
    """Markers carry the deployment unix time so the collector can use changes()."""
    if definition.is_marker:
        return float(point.timestamp_ns // 1_000_000_000)
    return float(point.fields[definition.field])


class DoraMetricsExporter:
    """Renders metric points as Prometheus gauges.

    encode builds a fresh registry per call; that registry is what the
    Pushgateway transport pushes. exposition renders it as text.
    """

    def encode(self, points: Iterable[MetricPoint]) -> CollectorRegistry:
        registry = CollectorRegistry()
        gauges: Dict[Tuple[str, Tuple[str, ...]], Gauge] = {}

        for point in points:
            definition = _definition_for(point)
            labelnames = tuple(point.tags.keys())
            key = (definition.series, labelnames)
            gauge = gauges.get(key)
            if gauge is None:
                gauge = Gauge(definition.series, definition.help, labelnames, registry=registry)
                gauges[key] = gauge

            labels = {name: _label_value(value) for name, value in point.tags.items()}
            target = gauge.labels(**labels) if labelnames else gauge
            target.set(gauge_value(point, definition))

        return registry

    def exposition(self, points: Iterable[MetricPoint]) -> str:
        return generate_latest(self.encode(points)).decode("utf-8")
