import pytest

from cloudops_metrics.gmp.monitoredresource import map_to_prometheus_target
from cloudops_metrics.pdata import MonitoredResource, Resource

ZONE = "us-central1-c"
REGION = "us-central1"
SERVICE = "myservicename"
INSTANCE = "myserviceinstanceid"

_SERVICE_ATTRS = {"service.name": SERVICE, "service.instance.id": INSTANCE}


def _target(location="", cluster="", namespace="", job="", instance=""):
    labels = dict(
        location=location, cluster=cluster, namespace=namespace, job=job, instance=instance
    )
    return MonitoredResource(type="prometheus_target", labels=labels)


_GKE_ATTRS = {
    **_SERVICE_ATTRS,
    "cloud.platform": "gcp_kubernetes_engine",
    "cloud.availability_zone": ZONE,
    "k8s.cluster.name": "mycluster",
    "k8s.namespace.name": "mynamespace",
    "k8s.pod.name": "mypod",
    "k8s.container.name": "mycontainer",
}

CASES = {
    "no attributes": ({}, _target()),
    "gke container": (
        _GKE_ATTRS,
        _target(ZONE, "mycluster", "mynamespace", SERVICE, INSTANCE),
    ),
    "receiver with zone": (
        {**_SERVICE_ATTRS, "cloud.availability_zone": ZONE},
        _target(location=ZONE, job=SERVICE, instance=INSTANCE),
    ),
    "receiver with region": (
        {**_SERVICE_ATTRS, "cloud.region": REGION},
        _target(location=REGION, job=SERVICE, instance=INSTANCE),
    ),
    "sdk service namespace": (
        {
            **_SERVICE_ATTRS,
            "cloud.availability_zone": ZONE,
            "service.namespace": "myservicenamespace",
        },
        _target(location=ZONE, job=f"myservicenamespace/{SERVICE}", instance=INSTANCE),
    ),
}


@pytest.mark.parametrize("attrs,expected", list(CASES.values()), ids=list(CASES))
def test_map_to_prometheus_target(attrs, expected):
    assert map_to_prometheus_target(Resource(attributes=attrs)) == expected


def test_zone_takes_precedence_over_region():
    attrs = {"cloud.availability_zone": ZONE, "cloud.region": REGION}
    got = map_to_prometheus_target(Resource(attributes=attrs))
    assert got.labels["location"] == ZONE


def test_non_string_attribute_reads_as_empty():
    got = map_to_prometheus_target(Resource(attributes={"service.name": 5}))
    assert got.labels["job"] == ""