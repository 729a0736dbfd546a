from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol

from ...domain.models import MetricPoint
from .delivery import (
    DEFAULT_TIMEOUT_SECONDS,
    DeliveryChannel,
    InfluxDBTransport,
    PushgatewayTransport,
)
from .line_protocol import LineProtocolEncoder
from .prometheus.prometheus_exporter import DoraMetricsExporter

PUSHGATEWAY = "pushgateway"
INFLUXDB = "influxdb"
BACKENDS = (PUSHGATEWAY, INFLUXDB)


class Encoder(Protocol):
    def encode(self, points: Iterable[MetricPoint]) -> Any:
        ...


@dataclass
class MetricsBackend:
    """An encoder paired with the channel that delivers its output."""

    name: str
    encoder: Encoder
    channel: DeliveryChannel

    def publish(self, points: Iterable[MetricPoint], grouping: Mapping[str, str]) -> None:
        self.channel.push(self.encoder.encode(points), grouping)


def build_backend(
    name: str,
    url: str,
    *,
    job_name: str = "dora_metrics",
    bucket: str = "default",
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    **channel_options,
) -> MetricsBackend:
    name = (name or PUSHGATEWAY).strip().lower()
    if name == PUSHGATEWAY:
        transport = PushgatewayTransport(url, job_name=job_name, timeout=timeout)
        return MetricsBackend(name, DoraMetricsExporter(), DeliveryChannel(transport, **channel_options))
    if name == INFLUXDB:
        transport = InfluxDBTransport(url, bucket=bucket, timeout=timeout)
        return MetricsBackend(name, LineProtocolEncoder(), DeliveryChannel(transport, **channel_options))

    raise ValueError(f"Unknown metrics backend {name!r}, expected one of {', '.join(BACKENDS)}")
