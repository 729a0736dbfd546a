from unittest.mock import MagicMock

import pytest
from prometheus_client import CollectorRegistry

from dora_metrics.adapters.exporters.backends import MetricsBackend, build_backend
from dora_metrics.adapters.exporters.delivery import InfluxDBTransport, PushgatewayTransport
from dora_metrics.adapters.exporters.line_protocol import LineProtocolEncoder
from dora_metrics.adapters.exporters.prometheus.prometheus_exporter import DoraMetricsExporter
from dora_metrics.domain.models import MetricPoint

POINT = MetricPoint("deployment", {"project": "p"}, {"count": 1}, 5)


def test_pushgateway_backend():
    backend = build_backend("pushgateway", "http://pushgateway:9091", job_name="ci")
    assert isinstance(backend.encoder, DoraMetricsExporter)
    assert isinstance(backend.channel.transport, PushgatewayTransport)
    assert backend.channel.transport.job_name == "ci"


def test_influxdb_backend():
    backend = build_backend("InfluxDB", "http://influx:8086", bucket="dora")
    assert isinstance(backend.encoder, LineProtocolEncoder)
    assert isinstance(backend.channel.transport, InfluxDBTransport)
    assert backend.channel.transport.bucket == "dora"


def test_unknown_backend():
    with pytest.raises(ValueError, match="Unknown metrics backend"):
        build_backend("graphite", "http://graphite")


def test_publish_encodes_then_pushes():
    channel = MagicMock()
    backend = MetricsBackend("influxdb", LineProtocolEncoder(), channel)
    backend.publish([POINT], {"project": "p"})

    channel.push.assert_called_once_with("deployment,project=p count=1i 5", {"project": "p"})


def test_pushgateway_publishes_a_registry():
    channel = MagicMock()
    MetricsBackend("pushgateway", DoraMetricsExporter(), channel).publish([POINT], {"project": "p"})

    registry, grouping = channel.push.call_args.args
    assert isinstance(registry, CollectorRegistry)
    assert grouping == {"project": "p"}
