from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Union

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def parse_github_datetime(date_str: str) -> datetime:
    """Parse GitHub ISO timestamps like '2026-01-12T10:11:12Z' to aware datetime.

    Naive values are assumed to be UTC. Raises ValueError for anything that
    is not ISO-8601.
    """
    if not isinstance(date_str, str) or not date_str.strip():
        raise ValueError(f"not a timestamp: {date_str!r}")

    date_str = date_str.strip()
    # GitHub uses 'Z' for UTC. datetime.fromisoformat expects '+00:00'.
    if date_str.endswith("Z"):
        date_str = date_str[:-1] + "+00:00"
    parsed = datetime.fromisoformat(date_str)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_timestamp(value: Union[str, int, float]) -> datetime:
    """Parse an ISO-8601 string or an epoch-milliseconds number."""
    if isinstance(value, bool):
        raise ValueError(f"not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return EPOCH + timedelta(milliseconds=value)
    return parse_github_datetime(value)


def to_unix_nanos(moment: datetime) -> int:
    return (moment - EPOCH) // timedelta(microseconds=1) * 1000


def to_unix_seconds(moment: datetime) -> int:
    return (moment - EPOCH) // timedelta(seconds=1)
