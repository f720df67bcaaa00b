"""Build metadata and the process-wide health flag.

Both are created once by the application bootstrap and handed to the API
through ``app.state``; request handlers only read them.
"""

from __future__ import annotations

import os
import platform
import threading
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class BuildInfo:
    """Immutable build metadata reported by ``/api/status``."""

    version: str
    build_info: str = "No build info"


class HealthFlag:
    """A boolean health state that can be flipped from any thread."""

    def __init__(self, healthy: bool = False) -> None:
        self._event = threading.Event()
        if healthy:
            self._event.set()

    @property
    def healthy(self) -> bool:
        return self._event.is_set()

    def mark_healthy(self) -> None:
        self._event.set()

    def mark_unhealthy(self) -> None:
        self._event.clear()


def build_status(
    build: BuildInfo,
    health: HealthFlag,
    client_address: str = "",
    server_host: str = "",
) -> dict[str, Any]:
    """Assemble the status document for one request."""
    try:
        hostname = platform.node() or "hostname not available"
    except OSError:
        hostname = "hostname not available"

    return {
        "healthy": health.healthy,
        "version": build.version,
        "buildInfo": build.build_info,
        "hostname": hostname,
        "os": platform.system().lower(),
        "architecture": platform.machine(),
        "cpuCount": os.cpu_count() or 0,
        "pythonVersion": platform.python_version(),
        "clientAddress": client_address,
        "serverHost": server_host,
    }
