from __future__ import annotations

from typing import Optional


class DoraMetricsError(Exception):
    """Base class for errors raised by dora_metrics."""


class ConfigError(DoraMetricsError):
    pass


class PushError(DoraMetricsError):
    """A single push attempt was answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {body}" if body else f"HTTP {status_code}")


class DeliveryError(DoraMetricsError):
    """Every push attempt failed. Carries the last underlying error."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed to push metrics after {attempts} attempts: {last_error}")
