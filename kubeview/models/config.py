"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ClusterConfig:
    """Kubernetes API access configuration."""

    namespace_scope: str = "*"
    in_cluster: bool = False
    scrape_timeout_seconds: int = 30


@dataclass
class APIConfig:
    """REST API configuration."""

    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeViewConfig:
    """Top-level KubeView configuration."""

    build_info: str = "No build info"
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
