"""Metric configuration, data model, point cache, normalization and managed-Prometheus helpers."""

__version__ = "0.1.0"