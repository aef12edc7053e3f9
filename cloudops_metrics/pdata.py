"""In-memory metric data model: metrics, resources and data points."""

from __future__ import annotations

import base64
import copy
import enum
import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


class MetricDataType(enum.Enum):
    """The kind of data a metric carries."""

    NONE = "None"
    GAUGE = "Gauge"
    SUM = "Sum"
    HISTOGRAM = "Histogram"
    EXPONENTIAL_HISTOGRAM = "ExponentialHistogram"
    SUMMARY = "Summary"

    def __str__(self) -> str:
        return self.value


@dataclass
class Metric:
    """A named metric with its data type."""

    name: str = ""
    data_type: MetricDataType = MetricDataType.NONE
    description: str = ""
    unit: str = ""


@dataclass
class Resource:
    """The entity that produced telemetry, described by its attributes."""

    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class MonitoredResource:
    """A monitored resource as understood by the monitoring backend."""

    type: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class NumberDataPoint:
    """A single integer or floating point measurement."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    value: int | float = 0

    def copy(self) -> NumberDataPoint:
        """Return an independent deep copy of this point."""
        return copy.deepcopy(self)


@dataclass
class HistogramDataPoint:
    """A histogram with explicit bucket boundaries."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    count: int = 0
    sum: float = 0.0
    bucket_counts: list[int] = field(default_factory=list)
    explicit_bounds: list[float] = field(default_factory=list)

    def copy(self) -> HistogramDataPoint:
        """Return an independent deep copy of this point."""
        return copy.deepcopy(self)


@dataclass
class Buckets:
    """One side (positive or negative) of an exponential histogram."""

    offset: int = 0
    bucket_counts: list[int] = field(default_factory=list)

    def copy(self) -> Buckets:
        """Return an independent copy of these buckets."""
        return Buckets(self.offset, list(self.bucket_counts))


@dataclass
class ExponentialHistogramDataPoint:
    """A histogram whose bucket boundaries grow exponentially."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    count: int = 0
    sum: float = 0.0
    scale: int = 0
    zero_count: int = 0
    positive: Buckets = field(default_factory=Buckets)
    negative: Buckets = field(default_factory=Buckets)

    def copy(self) -> ExponentialHistogramDataPoint:
        """Return an independent deep copy of this point."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class ValueAtQuantile:
    """The value observed at one quantile of a summary."""

    quantile: float = 0.0
    value: float = 0.0


@dataclass
class SummaryDataPoint:
    """A summary: count, sum and quantile values."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    count: int = 0
    sum: float = 0.0
    quantile_values: list[ValueAtQuantile] = field(default_factory=list)

    def copy(self) -> SummaryDataPoint:
        """Return an independent deep copy of this point."""
        return copy.deepcopy(self)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return format(Decimal(repr(value)).normalize(), "f")


def value_as_string(value: Any) -> str:
    """Render an attribute value as a string, the way attribute values print."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    return str(value)