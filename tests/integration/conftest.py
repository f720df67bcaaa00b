"""Shared fixtures for KubeView integration tests.

Provides an in-memory ClusterReader seeded with realistic objects so the
full Collector -> Sanitizer -> Aggregator pipeline and the REST layer can be
exercised without touching a real Kubernetes cluster.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any

import pytest
from fastapi.testclient import TestClient

from kubeview.api.app import create_app
from kubeview.collector import Collector
from kubeview.models.resources import RawObject, ResourceKind
from kubeview.pipeline import ScrapePipeline

# ---------------------------------------------------------------------------
# Certificate fixtures
# ---------------------------------------------------------------------------

CERT_PEM = (
    "-----BEGIN CERTIFICATE-----\n"
    "MIIBszCCAVmgAwIBAgIUQ2VydGlmaWNhdGVGb3JUZXN0czAKBggqhkjOPQQDAjAW\n"
    "MRQwEgYDVQQDDAtleGFtcGxlLmNvbTAeFw0yNDAxMDEwMDAwMDBaFw0zNDAxMDEw\n"
    "-----END CERTIFICATE-----"
)

SECOND_CERT_PEM = (
    "-----BEGIN CERTIFICATE-----\n"
    "MIIBAzCBq6ADAgECAgEBMAoGCCqGSM49BAMCMBIxEDAOBgNVBAMMB3Rlc3QtY2Ew\n"
    "-----END CERTIFICATE-----"
)


# ---------------------------------------------------------------------------
# Object factory helpers
# ---------------------------------------------------------------------------


def make_object(
    name: str,
    namespace: str = "default",
    annotations: dict[str, str] | None = None,
    **fields: Any,
) -> RawObject:
    """Create an API-shaped object with sensible metadata defaults."""
    obj: RawObject = {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{namespace}-{name}",
            "resourceVersion": "1001",
            "labels": {"app": name},
            "annotations": annotations or {},
        },
    }
    obj.update(fields)
    return obj


def make_secret(
    name: str,
    data: dict[str, str] | None = None,
    string_data: dict[str, str] | None = None,
    namespace: str = "default",
    annotations: dict[str, str] | None = None,
) -> RawObject:
    fields: dict[str, Any] = {"type": "Opaque", "data": data or {}}
    if string_data is not None:
        fields["stringData"] = string_data
    return make_object(name, namespace=namespace, annotations=annotations, **fields)


def make_config_map(
    name: str,
    data: dict[str, str] | None = None,
    binary_data: dict[str, Any] | None = None,
    namespace: str = "default",
) -> RawObject:
    fields: dict[str, Any] = {"data": data or {}}
    if binary_data is not None:
        fields["binaryData"] = binary_data
    return make_object(name, namespace=namespace, **fields)


def default_namespace_objects() -> dict[ResourceKind, list[RawObject]]:
    """A small but complete application in the ``default`` namespace."""
    return {
        ResourceKind.POD: [
            make_object(
                "web-7b4f8c6d-x2kj",
                spec={"containers": [{"name": "web", "image": "nginx:1.27"}]},
                status={"phase": "Running", "podIP": "10.0.0.12"},
            ),
            make_object(
                "web-7b4f8c6d-q9zt",
                spec={"containers": [{"name": "web", "image": "nginx:1.27"}]},
                status={"phase": "Pending"},
            ),
        ],
        ResourceKind.SERVICE: [
            make_object("web", spec={"type": "ClusterIP", "selector": {"app": "web"}, "ports": [{"port": 80}]}),
        ],
        ResourceKind.ENDPOINTS: [
            make_object("web", subsets=[{"addresses": [{"ip": "10.0.0.12"}], "ports": [{"port": 80}]}]),
        ],
        ResourceKind.PERSISTENT_VOLUME: [
            {
                "metadata": {"name": "pv-data", "annotations": {}},
                "spec": {"capacity": {"storage": "10Gi"}, "claimRef": {"namespace": "default", "name": "data"}},
            },
        ],
        ResourceKind.PERSISTENT_VOLUME_CLAIM: [
            make_object("data", spec={"volumeName": "pv-data"}, status={"phase": "Bound"}),
        ],
        ResourceKind.DEPLOYMENT: [
            make_object("web", spec={"replicas": 2}, status={"readyReplicas": 1}),
        ],
        ResourceKind.DAEMON_SET: [],
        ResourceKind.REPLICA_SET: [
            make_object("web-7b4f8c6d", spec={"replicas": 2}),
        ],
        ResourceKind.STATEFUL_SET: [],
        ResourceKind.INGRESS: [],
        ResourceKind.CONFIG_MAP: [
            make_config_map(
                "web-config",
                data={
                    "nginx.conf": "server {\n  listen 80;\n}\n",
                    "ca-bundle.crt": f"# cluster CA\n{CERT_PEM}\n# end of bundle\n",
                },
            ),
        ],
        ResourceKind.SECRET: [
            make_secret("sh.helm.release.v1.foo.v1", data={"release": "SDRzSUFBQUFBQUFDLzZ5Vw=="}),
            make_secret("db-creds", data={"password": "cGFzcw=="}),
        ],
    }


# ---------------------------------------------------------------------------
# Fake cluster reader
# ---------------------------------------------------------------------------


class FakeClusterReader:
    """In-memory ClusterReader.

    Objects are deep-copied on every call, like fresh API responses.
    ``failures`` makes the listed kinds raise; ``delays`` makes them sleep
    first; ``block`` makes them wait until cancelled.
    """

    def __init__(
        self,
        objects: dict[ResourceKind, list[RawObject]] | None = None,
        namespaces: list[RawObject] | None = None,
    ) -> None:
        self.objects = objects if objects is not None else {}
        self.namespaces = namespaces if namespaces is not None else []
        self.failures: dict[ResourceKind, Exception] = {}
        self.namespaces_error: Exception | None = None
        self.delays: dict[ResourceKind, float] = {}
        self.block: set[ResourceKind] = set()
        self.calls: list[tuple[ResourceKind, str | None]] = []
        self.cancelled: list[ResourceKind] = []

    async def list_objects(self, kind: ResourceKind, namespace: str | None) -> list[RawObject]:
        self.calls.append((kind, namespace))
        try:
            if kind in self.delays:
                await asyncio.sleep(self.delays[kind])
            if kind in self.block:
                await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled.append(kind)
            raise
        if kind in self.failures:
            raise self.failures[kind]
        items = self.objects.get(kind, [])
        if namespace is not None:
            items = [obj for obj in items if obj.get("metadata", {}).get("namespace") == namespace]
        return copy.deepcopy(items)

    async def list_namespaces(self) -> list[RawObject]:
        if self.namespaces_error is not None:
            raise self.namespaces_error
        return copy.deepcopy(self.namespaces)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def reader() -> FakeClusterReader:
    return FakeClusterReader(
        objects=default_namespace_objects(),
        namespaces=[
            {"metadata": {"name": "default"}, "status": {"phase": "Active"}},
            {"metadata": {"name": "kube-system"}, "status": {"phase": "Active"}},
        ],
    )


@pytest.fixture
def pipeline(reader: FakeClusterReader) -> ScrapePipeline:
    return ScrapePipeline(Collector(reader, timeout_seconds=5.0))


@pytest.fixture
def client(reader: FakeClusterReader, pipeline: ScrapePipeline) -> TestClient:
    app = create_app(pipeline=pipeline, reader=reader)
    return TestClient(app, raise_server_exceptions=False)
