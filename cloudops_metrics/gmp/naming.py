"""Metric naming for the managed Prometheus service."""

from __future__ import annotations

from cloudops_metrics.pdata import Metric, MetricDataType


def get_metric_name(base_name: str, metric: Metric) -> str:
    """Append the managed-Prometheus type suffix to a metric's base name."""
    data_type = metric.data_type
    if data_type is MetricDataType.SUM:
        return base_name + "/counter"
    if data_type is MetricDataType.GAUGE:
        return base_name + "/gauge"
    if data_type is MetricDataType.SUMMARY:
        # The _sum series is a counter; count and quantiles are plain summaries.
        if base_name.endswith("_sum"):
            return base_name + "/summary:counter"
        return base_name + "/summary"
    if data_type is MetricDataType.HISTOGRAM:
        return base_name + "/histogram"
    raise ValueError(f"unsupported metric datatype: {data_type}")