"""Configuration of the managed-Prometheus metrics exporter."""

from __future__ import annotations

from dataclasses import dataclass, field

from cloudops_metrics.config import (
    DEFAULT_TIMEOUT,
    ClientConfig,
    Config,
    ConfigError,
    default_config,
    validate_config,
)
from cloudops_metrics.gmp.monitoredresource import map_to_prometheus_target
from cloudops_metrics.gmp.naming import get_metric_name

TYPE_STR = "googlemanagedprometheus"


@dataclass
class GMPConfig:
    """The subset of the exporter configuration that users may set."""

    project_id: str = ""
    user_agent: str = ""
    client_config: ClientConfig = field(default_factory=ClientConfig)

    def to_collector_config(self) -> Config:
        """Return a full exporter configuration set up for managed Prometheus."""
        cfg = default_config()
        metric = cfg.metric_config
        metric.prefix = "prometheus.googleapis.com"
        metric.skip_create_metric_descriptor = True
        metric.instrumentation_library_labels = False
        metric.service_resource_labels = False
        metric.get_metric_name = get_metric_name
        metric.map_monitored_resource = map_to_prometheus_target
        metric.enable_sum_of_squared_deviation = True
        metric.cumulative_normalization = False
        cfg.project_id = self.project_id
        cfg.user_agent = self.user_agent
        metric.client_config = self.client_config
        return cfg


@dataclass
class GMPExporterConfig:
    """Exporter settings: component id, API timeout and the managed-Prometheus config."""

    component_id: str = TYPE_STR
    gmp_config: GMPConfig = field(default_factory=GMPConfig)
    # Timeout for all API calls, in seconds.
    timeout: float = DEFAULT_TIMEOUT

    def validate(self) -> None:
        """Raise ConfigError if the resulting exporter configuration is invalid."""
        try:
            validate_config(self.gmp_config.to_collector_config())
        except ConfigError as err:
            raise ConfigError(f"exporter settings are invalid :{err}") from err


def create_default_config() -> GMPExporterConfig:
    """Return the default managed-Prometheus exporter configuration."""
    return GMPExporterConfig(
        component_id=TYPE_STR,
        gmp_config=GMPConfig(user_agent="opentelemetry-collector-contrib/{{version}}"),
        timeout=DEFAULT_TIMEOUT,
    )