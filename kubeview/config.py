"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kubeview.models.config import APIConfig, ClusterConfig, KubeViewConfig, LogConfig
from kubeview.models.resources import WILDCARD_NAMESPACE

_RE_NAMESPACE = re.compile(r"^[a-z0-9]([-a-z0-9]{0,61}[a-z0-9])?$")


# Set without the prefix by the Helm chart; read when the prefixed name is unset.
_UNPREFIXED_FALLBACKS = frozenset({"NAMESPACE_SCOPE", "IN_CLUSTER"})


def _env(key: str, default: str = "") -> str:
    value = os.environ.get(f"KUBEVIEW_{key}")
    if value is None and key in _UNPREFIXED_FALLBACKS:
        value = os.environ.get(key)
    return default if value is None else value


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_namespace_scope(value: str) -> str:
    value = value.strip() or WILDCARD_NAMESPACE
    if value != WILDCARD_NAMESPACE and not _RE_NAMESPACE.match(value):
        raise ValueError(f"Invalid namespace scope: {value!r}. Must be '*' or a namespace name")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubeViewConfig:
    """Load configuration from KUBEVIEW_* environment variables."""
    return KubeViewConfig(
        build_info=_env("BUILD_INFO", "No build info"),
        cluster=ClusterConfig(
            namespace_scope=_validate_namespace_scope(_env("NAMESPACE_SCOPE", WILDCARD_NAMESPACE)),
            in_cluster=_env_bool("IN_CLUSTER", False),
            scrape_timeout_seconds=_env_int("SCRAPE_TIMEOUT", 30, min_val=1, max_val=300),
        ),
        api=APIConfig(
            host=_env("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8000, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
