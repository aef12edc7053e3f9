"""Mapping of resources to the prometheus_target monitored resource."""

from __future__ import annotations

from typing import Any, Mapping

from cloudops_metrics.pdata import MonitoredResource, Resource

SERVICE_NAME = "service.name"
SERVICE_NAMESPACE = "service.namespace"
SERVICE_INSTANCE_ID = "service.instance.id"
CLOUD_AVAILABILITY_ZONE = "cloud.availability_zone"
CLOUD_REGION = "cloud.region"
K8S_CLUSTER_NAME = "k8s.cluster.name"
K8S_NAMESPACE_NAME = "k8s.namespace.name"


def _string_or_empty(attributes: Mapping[str, Any], key: str) -> str:
    value = attributes.get(key)
    return value if isinstance(value, str) else ""


def map_to_prometheus_target(resource: Resource) -> MonitoredResource:
    """Build a prometheus_target monitored resource from resource attributes."""
    attrs = resource.attributes
    job = _string_or_empty(attrs, SERVICE_NAME)
    namespace = _string_or_empty(attrs, SERVICE_NAMESPACE)
    if namespace:
        job = f"{namespace}/{job}"
    location = _string_or_empty(attrs, CLOUD_AVAILABILITY_ZONE) or _string_or_empty(
        attrs, CLOUD_REGION
    )
    return MonitoredResource(
        type="prometheus_target",
        labels={
            "location": location,
            "cluster": _string_or_empty(attrs, K8S_CLUSTER_NAME),
            "namespace": _string_or_empty(attrs, K8S_NAMESPACE_NAME),
            "job": job,
            "instance": _string_or_empty(attrs, SERVICE_INSTANCE_ID),
        },
    )