"""Cache of reference data points, with periodic collection of unused entries."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from cloudops_metrics.pdata import (
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    Metric,
    MonitoredResource,
    NumberDataPoint,
    SummaryDataPoint,
    value_as_string,
)

GC_INTERVAL = 20 * 60.0  # seconds
_POLL_INTERVAL = 0.05


@dataclass
class _UsedPoint:
    point: Any
    used: bool


class Cache:
    """Stores points by identifier; entries unused between two collections are dropped."""

    def __init__(self) -> None:
        self._number: dict[str, _UsedPoint] = {}
        self._summary: dict[str, _UsedPoint] = {}
        self._histogram: dict[str, _UsedPoint] = {}
        self._exponential_histogram: dict[str, _UsedPoint] = {}
        self._lock = threading.Lock()

    def _get(self, store: dict[str, _UsedPoint], identifier: str) -> tuple[Any, bool]:
        with self._lock:
            entry = store.get(identifier)
            if entry is None:
                return None, False
            entry.used = True
            return entry.point, True

    def _set(self, store: dict[str, _UsedPoint], identifier: str, point: Any) -> None:
        with self._lock:
            store[identifier] = _UsedPoint(point, True)

    def get_number_data_point(self, identifier: str) -> tuple[NumberDataPoint | None, bool]:
        """Return the cached point for the identifier and whether it was found."""
        return self._get(self._number, identifier)

    def set_number_data_point(self, identifier: str, point: NumberDataPoint | None) -> None:
        """Cache the point under the identifier."""
        self._set(self._number, identifier, point)

    def get_summary_data_point(self, identifier: str) -> tuple[SummaryDataPoint | None, bool]:
        """Return the cached point for the identifier and whether it was found."""
        return self._get(self._summary, identifier)

    def set_summary_data_point(self, identifier: str, point: SummaryDataPoint | None) -> None:
        """Cache the point under the identifier."""
        self._set(self._summary, identifier, point)

    def get_histogram_data_point(
        self, identifier: str
    ) -> tuple[HistogramDataPoint | None, bool]:
        """Return the cached point for the identifier and whether it was found."""
        return self._get(self._histogram, identifier)

    def set_histogram_data_point(
        self, identifier: str, point: HistogramDataPoint | None
    ) -> None:
        """Cache the point under the identifier."""
        self._set(self._histogram, identifier, point)

    def get_exponential_histogram_data_point(
        self, identifier: str
    ) -> tuple[ExponentialHistogramDataPoint | None, bool]:
        """Return the cached point for the identifier and whether it was found."""
        return self._get(self._exponential_histogram, identifier)

    def set_exponential_histogram_data_point(
        self, identifier: str, point: ExponentialHistogramDataPoint | None
    ) -> None:
        """Cache the point under the identifier."""
        self._set(self._exponential_histogram, identifier, point)

    def collect(self) -> None:
        """Drop entries not used since the last collection; mark the rest unused."""
        with self._lock:
            for store in (
                self._number,
                self._summary,
                self._histogram,
                self._exponential_histogram,
            ):
                stale = [key for key, entry in store.items() if not entry.used]
                for key in stale:
                    del store[key]
                for entry in store.values():
                    entry.used = False

    def gc(self, shutdown: threading.Event, ticks: queue.Queue) -> bool:
        """Wait for a tick or shutdown; collect on a tick.

        Returns False once shutdown is signalled, True after a collection.
        """
        while not shutdown.is_set():
            try:
                ticks.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            self.collect()
            return True
        return False

    def start(
        self, shutdown: threading.Event, interval: float = GC_INTERVAL
    ) -> threading.Thread:
        """Collect every `interval` seconds in a background thread until shutdown."""

        def run() -> None:
            while not shutdown.wait(interval):
                self.collect()

        thread = threading.Thread(target=run, name="datapoint-cache-gc", daemon=True)
        thread.start()
        return thread


def _format_map(labels: Mapping[str, Any] | None) -> str:
    items = sorted((labels or {}).items())
    return "map[" + " ".join(f"{key}:{value}" for key, value in items) + "]"


def identifier(
    resource: MonitoredResource | None,
    extra_labels: Mapping[str, str] | None,
    metric: Metric,
    attributes: Mapping[str, Any],
) -> str:
    """Return the unique string identifier of a metric's time series."""
    parts = []
    if resource is not None:
        parts.append(_format_map(resource.labels))
    parts.append(f" - {_format_map(extra_labels)}")
    parts.append(f" - {metric.name} -")
    for key in sorted(attributes):
        parts.append(f" {key}={value_as_string(attributes[key])}")
    return "".join(parts)