"""Exporter configuration and its validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from cloudops_metrics.pdata import Metric, MonitoredResource, Resource

# Consistent with the monitoring backend's timeout, in seconds.
DEFAULT_TIMEOUT = 12.0

# Metrics in these domains get no prefix.
KNOWN_DOMAINS = ("googleapis.com", "kubernetes.io", "istio.io", "knative.dev")


class ConfigError(ValueError):
    """Raised when a configuration is invalid."""


@dataclass
class ClientConfig:
    """Connection settings of an API client."""

    endpoint: str = ""
    # Only has effect if endpoint is set.
    use_insecure: bool = False
    # Returns extra options for the underlying API client; set programmatically.
    get_client_options: Callable[[], list[Any]] | None = None


@dataclass(frozen=True)
class AttributeMapping:
    """Maps an attribute key to the key sent to the trace backend."""

    key: str = ""
    replacement: str = ""


@dataclass
class TraceConfig:
    client_config: ClientConfig = field(default_factory=ClientConfig)
    attribute_mappings: list[AttributeMapping] = field(default_factory=list)


@dataclass(frozen=True)
class ResourceFilter:
    """Matches resource attribute keys by prefix."""

    prefix: str = ""


@dataclass
class MetricConfig:
    client_config: ClientConfig = field(default_factory=ClientConfig)
    prefix: str = ""
    skip_create_metric_descriptor: bool = False
    known_domains: list[str] = field(default_factory=list)
    instrumentation_library_labels: bool = False
    create_service_time_series: bool = False
    create_metric_descriptor_buffer_size: int = 0
    service_resource_labels: bool = False
    resource_filters: list[ResourceFilter] = field(default_factory=list)
    cumulative_normalization: bool = False
    enable_sum_of_squared_deviation: bool = False
    # Customises metric naming; base_name excludes the domain prefix.
    get_metric_name: Callable[[str, Metric], str] | None = None
    # Overrides how a resource maps to a monitored resource.
    map_monitored_resource: Callable[[Resource], MonitoredResource] | None = None


@dataclass
class LogConfig:
    client_config: ClientConfig = field(default_factory=ClientConfig)
    # Fallback log name for entries without one.
    default_log_name: str = ""


@dataclass
class Config:
    """Configuration of the cloud exporter."""

    project_id: str = ""
    user_agent: str = ""
    trace_config: TraceConfig = field(default_factory=TraceConfig)
    metric_config: MetricConfig = field(default_factory=MetricConfig)
    log_config: LogConfig = field(default_factory=LogConfig)


def default_config() -> Config:
    """Return the default exporter configuration."""
    return Config(
        user_agent="opentelemetry-collector-contrib {{version}}",
        metric_config=MetricConfig(
            known_domains=list(KNOWN_DOMAINS),
            prefix="workload.googleapis.com",
            create_metric_descriptor_buffer_size=10,
            instrumentation_library_labels=True,
            service_resource_labels=True,
            cumulative_normalization=True,
        ),
    )


def validate_config(cfg: Config) -> None:
    """Raise ConfigError if the configuration is invalid."""
    seen_keys: set[str] = set()
    seen_replacements: set[str] = set()
    for mapping in cfg.trace_config.attribute_mappings:
        if mapping.key in seen_keys:
            raise ConfigError(
                f"duplicate key in traces.attribute_mappings: {json.dumps(mapping.key)}"
            )
        seen_keys.add(mapping.key)
        if mapping.replacement in seen_replacements:
            raise ConfigError(
                "duplicate replacement in traces.attribute_mappings: "
                f"{json.dumps(mapping.replacement)}"
            )
        seen_replacements.add(mapping.replacement)