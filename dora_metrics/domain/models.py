from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from .time_utils import parse_github_datetime

FieldValue = Union[bool, int, float, str]
TagValue = Union[str, bool]


@dataclass(frozen=True)
class Commit:
    """One commit of a deployment, as delivered by a push webhook or JSON input."""

    message: str = ""
    timestamp: Optional[str] = None
    sha: Optional[str] = None
    author: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Commit":
        author = payload.get("author") or {}
        username = author.get("username") if isinstance(author, Mapping) else None
        return cls(
            message=payload.get("message") or "",
            timestamp=payload.get("timestamp") or None,
            sha=payload.get("sha") or payload.get("id") or None,
            author=username,
        )

    @property
    def short_sha(self) -> str:
        return (self.sha or "unknown")[:7]

    def committed_at(self) -> Optional[datetime]:
        """Commit time, or None when it is missing or not ISO-8601."""
        if not self.timestamp:
            return None
        try:
            return parse_github_datetime(self.timestamp)
        except ValueError:
            return None


@dataclass(frozen=True)
class PullRequestInfo:
    number: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SampleResult:
    """Outcome of one interval computation: a value or a reason it was skipped."""

    source: str
    seconds: Optional[float] = None
    skip_reason: Optional[str] = None
    capped: bool = False

    @classmethod
    def value(cls, source: str, seconds: float, *, capped: bool = False) -> "SampleResult":
        return cls(source=source, seconds=float(seconds), capped=capped)

    @classmethod
    def skip(cls, source: str, reason: str) -> "SampleResult":
        return cls(source=source, skip_reason=reason)

    @property
    def ok(self) -> bool:
        return self.seconds is not None


@dataclass(frozen=True)
class IntervalSummary:
    count: int
    skipped: int
    capped: int
    mean_seconds: Optional[float]

    @property
    def has_data(self) -> bool:
        return self.mean_seconds is not None


@dataclass(frozen=True)
class MetricPoint:
    """A single measurement ready for encoding.

    Tags keep insertion order; both mappings are read-only once built.
    """

    measurement: str
    tags: Mapping[str, TagValue]
    fields: Mapping[str, FieldValue]
    timestamp_ns: int

    def __post_init__(self) -> None:
        if not self.measurement:
            raise ValueError("measurement is required")
        if not self.fields:
            raise ValueError(f"{self.measurement}: at least one field is required")
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True)
class DeploymentSnapshot:
    deployed_at: datetime
    tags: Mapping[str, TagValue]
    has_task: bool
    points: Tuple[MetricPoint, ...] = ()
    summaries: Mapping[str, IntervalSummary] = field(default_factory=dict)
    incident_type: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "summaries", MappingProxyType(dict(self.summaries)))

    @property
    def measurements(self) -> Tuple[str, ...]:
        return tuple(point.measurement for point in self.points)

    def point(self, measurement: str) -> Optional[MetricPoint]:
        for candidate in self.points:
            if candidate.measurement == measurement:
                return candidate
        return None
