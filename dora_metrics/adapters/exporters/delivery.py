from __future__ import annotations

import logging
import time
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Tuple
from urllib.parse import quote

import requests
from prometheus_client import CollectorRegistry
from prometheus_client.exposition import pushadd_to_gateway

from ...errors import DeliveryError, PushError
from .line_protocol import CONTENT_TYPE as LINE_PROTOCOL_CONTENT_TYPE

logger = logging.getLogger(__name__)

RETRY_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 30.0


class Transport(Protocol):
    def send(self, payload: Any, grouping: Mapping[str, str]) -> None:
        ...


def _send(method: str, url: str, data: bytes, headers: Mapping[str, str], timeout: Optional[float]) -> None:
    response = requests.request(method, url, data=data, headers=dict(headers), timeout=timeout)
    if not response.ok:
        raise PushError(response.status_code, response.text)

    logger.info("Pushed metrics to %s", url)


def requests_handler(
    url: str,
    method: str,
    timeout: Optional[float],
    headers: Sequence[Tuple[str, str]],
    data: bytes,
) -> Callable[[], None]:
    """prometheus_client push handler backed by requests.

    Non-2xx answers raise PushError so that DeliveryChannel can retry them.
    """

    def handle() -> None:
        _send(method, url, data, dict(headers), timeout)

    return handle


class InfluxDBTransport:
    """Writes line protocol through the v1-compatible /write endpoint."""

    def __init__(self, url: str, bucket: str = "default", timeout: float = DEFAULT_TIMEOUT_SECONDS):
        if not url:
            raise ValueError("InfluxDB url is required")
        self.url = url.rstrip("/")
        self.bucket = bucket or "default"
        self.timeout = timeout

    def write_url(self) -> str:
        return f"{self.url}/write?db={quote(self.bucket, safe='')}&precision=ns"

    def send(self, payload: str, grouping: Mapping[str, str]) -> None:
        _send(
            "POST",
            self.write_url(),
            payload.encode("utf-8"),
            {"Content-Type": LINE_PROTOCOL_CONTENT_TYPE},
            self.timeout,
        )


class PushgatewayTransport:
    """Pushes a registry to a Prometheus Pushgateway.

    The grouping key ends with a per-deployment id so that every deployment
    stays a separate group instead of overwriting the previous one.
    prometheus_client builds the URL, including the @base64 form for label
    values that contain a slash.
    """

    def __init__(self, url: str, job_name: str = "dora_metrics", timeout: float = DEFAULT_TIMEOUT_SECONDS):
        if not url:
            raise ValueError("Pushgateway url is required")
        self.url = url.rstrip("/")
        self.job_name = job_name or "dora_metrics"
        self.timeout = timeout

    def send(self, payload: CollectorRegistry, grouping: Mapping[str, str]) -> None:
        # POST keeps other metric names already stored in the same group.
        pushadd_to_gateway(
            self.url,
            job=self.job_name,
            registry=payload,
            grouping_key=dict(grouping),
            timeout=self.timeout,
            handler=requests_handler,
        )


class DeliveryChannel:
    """Sends one payload with bounded retries and linear backoff.

    The delay before retry n is base_delay * n.
    """

    def __init__(
        self,
        transport: Transport,
        attempts: int = RETRY_ATTEMPTS,
        base_delay: float = RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.transport = transport
        self.attempts = attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def push(self, payload: Any, grouping: Optional[Mapping[str, str]] = None) -> None:
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.attempts + 1):
            try:
                self.transport.send(payload, grouping or {})
                logger.info("Successfully pushed DORA metrics")
                return
            except (requests.RequestException, PushError) as e:
                last_error = e
                if attempt == self.attempts:
                    break

                delay = self.base_delay * attempt
                logger.warning("Push attempt %d failed, retrying in %.0fms: %s", attempt, delay * 1000, e)
                self._sleep(delay)

        raise DeliveryError(self.attempts, last_error) from last_error
