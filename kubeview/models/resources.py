"""Resource kinds and the per-request scrape containers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

RawObject = dict[str, Any]
"""A Kubernetes object in API JSON shape (camelCase keys)."""

ScrapeResult = dict["ResourceKind", list[RawObject]]
"""Collector output: every ResourceKind mapped to its objects in source order."""

ScrapeEnvelope = dict[str, list[RawObject]]
"""Response document: one list per envelope key, every key present."""

WILDCARD_NAMESPACE = "*"


class ResourceKind(StrEnum):
    """Resource kinds scraped for every request, in envelope order."""

    POD = "Pod"
    SERVICE = "Service"
    ENDPOINTS = "Endpoints"
    PERSISTENT_VOLUME = "PersistentVolume"
    PERSISTENT_VOLUME_CLAIM = "PersistentVolumeClaim"
    DEPLOYMENT = "Deployment"
    DAEMON_SET = "DaemonSet"
    REPLICA_SET = "ReplicaSet"
    STATEFUL_SET = "StatefulSet"
    INGRESS = "Ingress"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"

    @property
    def envelope_key(self) -> str:
        """Top-level key of this kind in the scrape envelope."""
        return _ENVELOPE_KEYS[self]

    @property
    def namespaced(self) -> bool:
        """False for kinds that only exist at cluster scope."""
        return self is not ResourceKind.PERSISTENT_VOLUME


_ENVELOPE_KEYS: dict[ResourceKind, str] = {
    ResourceKind.POD: "pods",
    ResourceKind.SERVICE: "services",
    ResourceKind.ENDPOINTS: "endpoints",
    ResourceKind.PERSISTENT_VOLUME: "persistentvolumes",
    ResourceKind.PERSISTENT_VOLUME_CLAIM: "persistentvolumeclaims",
    ResourceKind.DEPLOYMENT: "deployments",
    ResourceKind.DAEMON_SET: "daemonsets",
    ResourceKind.REPLICA_SET: "replicasets",
    ResourceKind.STATEFUL_SET: "statefulsets",
    ResourceKind.INGRESS: "ingresses",
    ResourceKind.CONFIG_MAP: "configmaps",
    ResourceKind.SECRET: "secrets",
}


def resolve_namespace(selector: str) -> str | None:
    """Map a namespace selector to a concrete namespace, or None for all namespaces."""
    selector = selector.strip()
    if selector in ("", WILDCARD_NAMESPACE):
        return None
    return selector
