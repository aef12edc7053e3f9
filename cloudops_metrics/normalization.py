"""Normalization of cumulative data points whose start time is unknown or reset."""

from __future__ import annotations

import abc
import logging
import threading

from cloudops_metrics.datapointcache import Cache
from cloudops_metrics.pdata import (
    Buckets,
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    NumberDataPoint,
    SummaryDataPoint,
)

_MILLISECOND = 1_000_000  # nanoseconds
_STALE_MESSAGE = (
    "data point being processed older than last recorded reset, will not be emitted"
)


class Normalizer(abc.ABC):
    """Normalizes data points to handle cases in which the start time is unknown.

    Each method returns the normalized point, or None if the point should be dropped.
    """

    @abc.abstractmethod
    def normalize_exponential_histogram_data_point(
        self, point: ExponentialHistogramDataPoint, identifier: str
    ) -> ExponentialHistogramDataPoint | None:
        """Normalize an exponential histogram."""

    @abc.abstractmethod
    def normalize_histogram_data_point(
        self, point: HistogramDataPoint, identifier: str
    ) -> HistogramDataPoint | None:
        """Normalize a cumulative histogram."""

    @abc.abstractmethod
    def normalize_number_data_point(
        self, point: NumberDataPoint, identifier: str
    ) -> NumberDataPoint | None:
        """Normalize a cumulative, monotonic sum."""

    @abc.abstractmethod
    def normalize_summary_data_point(
        self, point: SummaryDataPoint, identifier: str
    ) -> SummaryDataPoint | None:
        """Normalize a summary."""


def _is_valid_interval(start: int, end: int) -> bool:
    return start < end


class DisabledNormalizer(Normalizer):
    """Performs no normalization.

    Explicit reset points (start time not before the timestamp) get a copy whose
    start time is one millisecond before the timestamp, so they stay valid.
    """

    @staticmethod
    def _fix_reset(point):
        if _is_valid_interval(point.start_timestamp, point.timestamp):
            return point
        fixed = point.copy()
        fixed.start_timestamp = point.timestamp - _MILLISECOND
        return fixed

    def normalize_exponential_histogram_data_point(self, point, identifier):
        return self._fix_reset(point)

    def normalize_histogram_data_point(self, point, identifier):
        return self._fix_reset(point)

    def normalize_number_data_point(self, point, identifier):
        return self._fix_reset(point)

    def normalize_summary_data_point(self, point, identifier):
        return self._fix_reset(point)


def _subtract_value(value: int | float, start: int | float) -> int | float:
    # A start point of the other value kind contributes nothing.
    if isinstance(value, float) == isinstance(start, float):
        return value - start
    return value


def _normalize_exponential_buckets(point_buckets: Buckets, start_buckets: Buckets) -> Buckets:
    offset_diff = point_buckets.offset - start_buckets.offset
    start_counts = start_buckets.bucket_counts
    counts = []
    for index, count in enumerate(point_buckets.bucket_counts):
        start_index = index + offset_diff
        if 0 <= start_index < len(start_counts):
            counts.append(count - start_counts[start_index])
        else:
            counts.append(count)
    return Buckets(point_buckets.offset, counts)


class StandardNormalizer(Normalizer):
    """Normalizes cumulative points that lack a start time or follow a reset point.

    The first point without a start time, or a reset point, is cached and not
    exported. Later points have the cached point subtracted before export.
    """

    def __init__(
        self,
        shutdown: threading.Event | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.cache = Cache()
        self.log = logger or logging.getLogger(__name__)
        if shutdown is not None:
            self.cache.start(shutdown)

    def _log_stale(self, start, point) -> None:
        self.log.info(
            "%s: lastRecordedReset=%s dataPoint=%s",
            _STALE_MESSAGE,
            start.timestamp,
            point.timestamp,
        )

    @staticmethod
    def _needs_reset(point, found: bool) -> bool:
        return (not found and point.start_timestamp == 0) or not _is_valid_interval(
            point.start_timestamp, point.timestamp
        )

    def normalize_exponential_histogram_data_point(self, point, identifier):
        normalized = point
        start, found = self.cache.get_exponential_histogram_data_point(identifier)
        if found:
            if not _is_valid_interval(start.start_timestamp, point.timestamp):
                self._log_stale(start, point)
                return None
            if point.scale != start.scale:
                # A change of scale is treated as a reset.
                self.cache.set_exponential_histogram_data_point(identifier, point)
                return None
            normalized = point.copy()
            normalized.start_timestamp = start.timestamp
            normalized.count = point.count - start.count
            normalized.sum = point.sum - start.sum
            normalized.zero_count = point.zero_count - start.zero_count
            normalized.positive = _normalize_exponential_buckets(
                normalized.positive, start.positive
            )
            normalized.negative = _normalize_exponential_buckets(
                normalized.negative, start.negative
            )
        if self._needs_reset(point, found):
            self.cache.set_exponential_histogram_data_point(identifier, point)
            return None
        return normalized

    def normalize_histogram_data_point(self, point, identifier):
        normalized = point
        start, found = self.cache.get_histogram_data_point(identifier)
        if found:
            if not _is_valid_interval(start.start_timestamp, point.timestamp):
                self._log_stale(start, point)
                return None
            if list(point.explicit_bounds) != list(start.explicit_bounds):
                # Bucket layout changed: treat as a reset.
                self.cache.set_histogram_data_point(identifier, point)
                return None
            normalized = point.copy()
            normalized.start_timestamp = start.timestamp
            normalized.count = point.count - start.count
            normalized.sum = point.sum - start.sum
            normalized.bucket_counts = [
                count - start_count
                for count, start_count in zip(
                    point.bucket_counts, start.bucket_counts, strict=True
                )
            ]
        if self._needs_reset(point, found):
            self.cache.set_histogram_data_point(identifier, point)
            return None
        return normalized

    def normalize_number_data_point(self, point, identifier):
        normalized = point
        start, found = self.cache.get_number_data_point(identifier)
        if found:
            if not _is_valid_interval(start.start_timestamp, point.timestamp):
                self._log_stale(start, point)
                return None
            normalized = point.copy()
            normalized.start_timestamp = start.timestamp
            normalized.value = _subtract_value(point.value, start.value)
        if self._needs_reset(point, found):
            self.cache.set_number_data_point(identifier, point)
            return None
        return normalized

    def normalize_summary_data_point(self, point, identifier):
        normalized = point
        start, found = self.cache.get_summary_data_point(identifier)
        if found:
            if not _is_valid_interval(start.start_timestamp, point.timestamp):
                self._log_stale(start, point)
                return None
            # Quantile values are copied unchanged; they cannot be normalized.
            normalized = point.copy()
            normalized.start_timestamp = start.timestamp
            normalized.count = point.count - start.count
            normalized.sum = point.sum - start.sum
        if self._needs_reset(point, found):
            self.cache.set_summary_data_point(identifier, point)
            return None
        return normalized