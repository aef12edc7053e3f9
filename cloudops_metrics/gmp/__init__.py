"""Managed-Prometheus metric naming, resource mapping and exporter configuration."""