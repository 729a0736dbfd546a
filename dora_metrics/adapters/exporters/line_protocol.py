"""InfluxDB line protocol encoding.

    measurement,tag1=val1,tag2=val2 field1=val1,field2=val2 timestamp
"""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from ...domain.models import FieldValue, MetricPoint, TagValue

CONTENT_TYPE = "text/plain; charset=utf-8"

_SPECIAL = re.compile(r"([,= ])")


def escape_tag(value: str) -> str:
    """Backslash-escape commas, equals signs and spaces; nothing else."""
    return _SPECIAL.sub(r"\\\1", value)


def format_tag_value(value: TagValue) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    return escape_tag(str(value))


def format_field_value(value: FieldValue) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    escaped = str(value).replace('"', '\\"')
    return f'"{escaped}"'


def create_line_protocol(
    measurement: str,
    tags: Mapping[str, TagValue],
    fields: Mapping[str, FieldValue],
    timestamp: int,
) -> str:
    tag_str = ",".join(f"{escape_tag(k)}={format_tag_value(v)}" for k, v in tags.items())
    field_str = ",".join(f"{escape_tag(k)}={format_field_value(v)}" for k, v in fields.items())
    head = f"{measurement},{tag_str}" if tag_str else measurement
    return f"{head} {field_str} {int(timestamp)}"


class LineProtocolEncoder:
    def encode_point(self, point: MetricPoint) -> str:
        return create_line_protocol(point.measurement, point.tags, point.fields, point.timestamp_ns)

    def encode(self, points: Iterable[MetricPoint]) -> str:
        return "\n".join(self.encode_point(point) for point in points)
