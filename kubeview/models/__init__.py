"""Core data structures for KubeView."""

from kubeview.models.config import KubeViewConfig
from kubeview.models.resources import (
    WILDCARD_NAMESPACE,
    RawObject,
    ResourceKind,
    ScrapeEnvelope,
    ScrapeResult,
    resolve_namespace,
)

__all__ = [
    "KubeViewConfig",
    "RawObject",
    "ResourceKind",
    "ScrapeEnvelope",
    "ScrapeResult",
    "WILDCARD_NAMESPACE",
    "resolve_namespace",
]
