"""Cluster API read interface and its kubernetes-asyncio implementation."""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import aiohttp
from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]
from kubernetes_asyncio.client.rest import ApiException  # type: ignore[import-untyped]

from kubeview.errors import UpstreamQueryError
from kubeview.models.resources import RawObject, ResourceKind
from kubeview.observability.logging import get_logger

_log = get_logger("collector.reader")

_ListCall = Callable[..., Awaitable[Any]]


class ClusterReader(Protocol):
    """Read-only view of the cluster API used by the Collector.

    ``namespace=None`` lists across all namespaces.  Cluster-scoped kinds
    ignore the namespace argument.
    """

    async def list_objects(self, kind: ResourceKind, namespace: str | None) -> list[RawObject]: ...

    async def list_namespaces(self) -> list[RawObject]: ...


def describe_api_error(exc: Exception) -> str:
    """Return the human-readable message of a cluster API failure.

    The API server puts a ``Status`` object in the response body whose
    ``message`` is what kubectl prints (``pods is forbidden: ...``); fall
    back to the HTTP status line when the body is not a Status.
    """
    if isinstance(exc, ApiException):
        body = exc.body
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if body:
            try:
                status = json.loads(body)
            except ValueError:
                status = None
            if isinstance(status, dict) and status.get("message"):
                return str(status["message"])
        return f"{exc.status} {exc.reason}".strip()
    return str(exc) or type(exc).__name__


async def create_api_client(in_cluster: bool = False) -> k8s_client.ApiClient:
    """Configure kubernetes-asyncio and return a new ApiClient.

    With ``in_cluster`` the service account is tried first and kubeconfig is
    the fallback; otherwise kubeconfig is tried first.
    """
    if in_cluster:
        try:
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config()
            _log.info("k8s client configured from in-cluster service account")
            return k8s_client.ApiClient()
        except k8s_config.ConfigException:
            _log.warning("in-cluster config unavailable; falling back to kubeconfig")

    try:
        await k8s_config.load_kube_config()
        _log.info("k8s client configured from kubeconfig")
    except (k8s_config.ConfigException, FileNotFoundError):
        k8s_config.load_incluster_config()
        _log.info("k8s client configured from in-cluster service account")
    return k8s_client.ApiClient()


class KubernetesClusterReader:
    """ClusterReader backed by the kubernetes-asyncio typed APIs.

    Typed response models are converted back to API-shaped dicts with
    ``ApiClient.sanitize_for_serialization`` so the rest of the pipeline
    works on plain JSON-like data (camelCase keys, ISO timestamps).
    """

    def __init__(self, api_client: k8s_client.ApiClient) -> None:
        self._api_client = api_client
        core = k8s_client.CoreV1Api(api_client)
        apps = k8s_client.AppsV1Api(api_client)
        networking = k8s_client.NetworkingV1Api(api_client)
        self._core = core

        # kind -> (namespaced list call, all-namespaces / cluster-scoped list call)
        self._calls: dict[ResourceKind, tuple[_ListCall | None, _ListCall]] = {
            ResourceKind.POD: (core.list_namespaced_pod, core.list_pod_for_all_namespaces),
            ResourceKind.SERVICE: (core.list_namespaced_service, core.list_service_for_all_namespaces),
            ResourceKind.ENDPOINTS: (core.list_namespaced_endpoints, core.list_endpoints_for_all_namespaces),
            ResourceKind.PERSISTENT_VOLUME: (None, core.list_persistent_volume),
            ResourceKind.PERSISTENT_VOLUME_CLAIM: (
                core.list_namespaced_persistent_volume_claim,
                core.list_persistent_volume_claim_for_all_namespaces,
            ),
            ResourceKind.DEPLOYMENT: (apps.list_namespaced_deployment, apps.list_deployment_for_all_namespaces),
            ResourceKind.DAEMON_SET: (apps.list_namespaced_daemon_set, apps.list_daemon_set_for_all_namespaces),
            ResourceKind.REPLICA_SET: (apps.list_namespaced_replica_set, apps.list_replica_set_for_all_namespaces),
            ResourceKind.STATEFUL_SET: (apps.list_namespaced_stateful_set, apps.list_stateful_set_for_all_namespaces),
            ResourceKind.INGRESS: (networking.list_namespaced_ingress, networking.list_ingress_for_all_namespaces),
            ResourceKind.CONFIG_MAP: (core.list_namespaced_config_map, core.list_config_map_for_all_namespaces),
            ResourceKind.SECRET: (core.list_namespaced_secret, core.list_secret_for_all_namespaces),
        }

    async def list_objects(self, kind: ResourceKind, namespace: str | None) -> list[RawObject]:
        namespaced_call, cluster_call = self._calls[kind]
        try:
            if namespace is not None and namespaced_call is not None:
                response = await namespaced_call(namespace)
            else:
                response = await cluster_call()
        except (ApiException, aiohttp.ClientError) as exc:
            raise UpstreamQueryError(kind.value, namespace, describe_api_error(exc)) from exc
        return self._items(response)

    async def list_namespaces(self) -> list[RawObject]:
        try:
            response = await self._core.list_namespace()
        except (ApiException, aiohttp.ClientError) as exc:
            raise UpstreamQueryError("Namespace", None, describe_api_error(exc)) from exc
        return self._items(response)

    def _items(self, response: Any) -> list[RawObject]:
        serialized = self._api_client.sanitize_for_serialization(response)
        return list(serialized.get("items") or [])

    async def close(self) -> None:
        await self._api_client.close()
