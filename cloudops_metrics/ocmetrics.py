"""Builders for census-style metrics: descriptors, time series and points."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence, Union


class DescriptorType(enum.IntEnum):
    """The kind of a census-style metric."""

    UNSPECIFIED = 0
    GAUGE_INT64 = 1
    GAUGE_DOUBLE = 2
    GAUGE_DISTRIBUTION = 3
    CUMULATIVE_INT64 = 4
    CUMULATIVE_DOUBLE = 5
    CUMULATIVE_DISTRIBUTION = 6
    SUMMARY = 7


@dataclass(frozen=True)
class LabelKey:
    """A label key with its description."""

    key: str
    description: str = ""


@dataclass(frozen=True)
class LabelValue:
    """A label value; has_value distinguishes an empty value from a missing one."""

    value: str = ""
    has_value: bool = False


@dataclass
class MetricDescriptor:
    """Name, kind and label keys of a metric."""

    name: str
    description: str = ""
    unit: str = ""
    type: DescriptorType = DescriptorType.UNSPECIFIED
    label_keys: list[LabelKey] = field(default_factory=list)


@dataclass(frozen=True)
class Bucket:
    """One bucket of a distribution."""

    count: int = 0


@dataclass
class DistributionValue:
    """A distribution with explicit bucket bounds."""

    count: int = 0
    sum: float = 0.0
    bounds: list[float] = field(default_factory=list)
    buckets: list[Bucket] = field(default_factory=list)


@dataclass(frozen=True)
class ValueAtPercentile:
    """The value observed at one percentile."""

    percentile: float
    value: float


@dataclass
class SummaryValue:
    """A summary: count, sum and a snapshot of percentile values."""

    count: int = 0
    sum: float = 0.0
    percentile_values: list[ValueAtPercentile] = field(default_factory=list)


PointValue = Union[int, float, DistributionValue, SummaryValue]


@dataclass
class Point:
    """A value observed at a timestamp."""

    timestamp: datetime
    value: PointValue


@dataclass
class TimeSeries:
    """The points of one label set, with the series' start time."""

    start_timestamp: datetime
    points: list[Point] = field(default_factory=list)
    label_values: list[LabelValue] = field(default_factory=list)


@dataclass
class OCMetric:
    """A metric descriptor together with its time series."""

    descriptor: MetricDescriptor
    timeseries: list[TimeSeries] = field(default_factory=list)


def _metric(
    kind: DescriptorType, name: str, keys: Sequence[str], series: Sequence[TimeSeries]
) -> OCMetric:
    return OCMetric(
        descriptor=MetricDescriptor(
            name=name,
            description="metrics description",
            unit="",
            type=kind,
            label_keys=[LabelKey(key, "description: " + key) for key in keys],
        ),
        timeseries=list(series),
    )


def gauge(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a double gauge metric."""
    return _metric(DescriptorType.GAUGE_DOUBLE, name, keys, args)


def gauge_int(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create an int64 gauge metric."""
    return _metric(DescriptorType.GAUGE_INT64, name, keys, args)


def gauge_dist(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a gauge distribution metric."""
    return _metric(DescriptorType.GAUGE_DISTRIBUTION, name, keys, args)


def cumulative(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a double cumulative metric."""
    return _metric(DescriptorType.CUMULATIVE_DOUBLE, name, keys, args)


def cumulative_int(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create an int64 cumulative metric."""
    return _metric(DescriptorType.CUMULATIVE_INT64, name, keys, args)


def cumulative_dist(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a cumulative distribution metric."""
    return _metric(DescriptorType.CUMULATIVE_DISTRIBUTION, name, keys, args)


def summary(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a summary metric."""
    return _metric(DescriptorType.SUMMARY, name, keys, args)


def timeseries(start: datetime, vals: Sequence[str], point: Point) -> TimeSeries:
    """Create a time series of one point, with label values matching the metric's keys."""
    return TimeSeries(
        start_timestamp=start,
        points=[point],
        label_values=[LabelValue(val, True) for val in vals],
    )


def double(ts: datetime, value: float) -> Point:
    """Create a double point."""
    return Point(timestamp=ts, value=float(value))


def dist_pt(ts: datetime, bounds: Sequence[float], counts: Sequence[int]) -> Point:
    """Create a distribution point from bucket bounds and per-bucket counts.

    The sum is estimated from lower bucket bounds: the first bucket counts as zero,
    bucket i contributes counts[i] * bounds[i - 1].
    """
    if len(counts) > len(bounds) + 1:
        raise ValueError(
            f"{len(counts)} bucket counts do not fit {len(bounds)} bucket bounds"
        )
    total = 0.0
    for index, bucket_count in enumerate(counts[1:], start=1):
        total += bucket_count * bounds[index - 1]
    value = DistributionValue(
        count=sum(counts),
        sum=total,
        bounds=list(bounds),
        buckets=[Bucket(bucket_count) for bucket_count in counts],
    )
    return Point(timestamp=ts, value=value)


def summ_pt(
    ts: datetime,
    count: int,
    total: float,
    percent: Sequence[float],
    vals: Sequence[float],
) -> Point:
    """Create a summary point; percent and vals pair up percentile by percentile."""
    if len(percent) != len(vals):
        raise ValueError(
            f"{len(percent)} percentiles but {len(vals)} values"
        )
    value = SummaryValue(
        count=count,
        sum=total,
        percentile_values=[
            ValueAtPercentile(pct, val) for pct, val in zip(percent, vals)
        ],
    )
    return Point(timestamp=ts, value=value)