"""Application bootstrap for KubeView.

Builds the scrape pipeline, serves it over HTTP and handles SIGTERM/SIGINT.
Startup order: config -> logging -> K8s client -> pipeline -> REST -> health

Shutdown is graceful: components are stopped in reverse startup order and
each stop error is logged without preventing the others from stopping.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from kubeview.config import load_config
from kubeview.models.config import KubeViewConfig
from kubeview.observability.logging import get_logger, setup_logging
from kubeview.observability.status import BuildInfo, HealthFlag

if TYPE_CHECKING:
    import structlog

    from kubeview.collector import KubernetesClusterReader
    from kubeview.pipeline import ScrapePipeline

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeViewApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Calling ``stop()`` on an app that was never started (or already stopped)
    is safe.
    """

    def __init__(self) -> None:
        self.config: KubeViewConfig | None = None
        self.health = HealthFlag()

        self._reader: KubernetesClusterReader | None = None
        self._pipeline: ScrapePipeline | None = None
        self._rest_server: object | None = None

        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def serving(self) -> bool:
        """False once the REST server task has exited on its own."""
        return bool(self._background_tasks) and not all(task.done() for task in self._background_tasks)

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Bring KubeView up: config, logging, cluster client, pipeline, REST API.

        Raises _ComponentError when the cluster client or the API server cannot start.
        """
        self.config = load_config()

        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info(
            "kubeview starting",
            version=_kubeview_version(),
            namespace_scope=self.config.cluster.namespace_scope,
        )

        await self._connect_cluster()
        self._start_pipeline()
        await self._serve_api()

        self.health.mark_healthy()
        self._running = True
        self._log.info("kubeview started", host=self.config.api.host, port=self.config.api.port)

    async def _connect_cluster(self) -> None:
        """Configure kubernetes-asyncio from the service account or kubeconfig."""
        assert self._log is not None
        assert self.config is not None
        self._log.debug("connecting to cluster api", in_cluster=self.config.cluster.in_cluster)
        try:
            from kubeview.collector import KubernetesClusterReader, create_api_client

            api_client = await create_api_client(in_cluster=self.config.cluster.in_cluster)
            self._reader = KubernetesClusterReader(api_client)
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    def _start_pipeline(self) -> None:
        assert self._log is not None
        assert self.config is not None
        assert self._reader is not None
        from kubeview.collector import Collector
        from kubeview.pipeline import ScrapePipeline

        collector = Collector(self._reader, timeout_seconds=self.config.cluster.scrape_timeout_seconds)
        self._pipeline = ScrapePipeline(collector)
        self._log.info("scrape pipeline ready", timeout=self.config.cluster.scrape_timeout_seconds)

    async def _serve_api(self) -> None:
        """Serve the FastAPI app with uvicorn as a background task."""
        assert self._log is not None
        assert self.config is not None
        self._log.debug("building rest api")
        try:
            import uvicorn

            from kubeview.api import create_app

            fastapi_app = create_app(
                pipeline=self._pipeline,
                reader=self._reader,
                config=self.config,
                health=self.health,
                build=BuildInfo(version=_kubeview_version(), build_info=self.config.build_info),
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host=self.config.api.host,
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            raise _ComponentError("rest", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("kubeview shutting down")

        self._running = False
        self.health.mark_unhealthy()

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]
        if self._background_tasks:
            _done, pending = await asyncio.wait(self._background_tasks, timeout=_SHUTDOWN_GRACE_SECONDS)
            for task in pending:
                log.warning("component stop timed out", component=task.get_name(), timeout=_SHUTDOWN_GRACE_SECONDS)
                task.cancel()
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()
        self._rest_server = None
        self._pipeline = None

        await self._disconnect_cluster()
        log.info("kubeview stopped")

    async def _disconnect_cluster(self) -> None:
        """Release the ApiClient connection pool held by the reader."""
        if self._reader is None:
            return
        log = self._log or get_logger("app")
        try:
            await self._reader.close()
        except Exception as exc:
            log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._reader = None


def _kubeview_version() -> str:
    from kubeview import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = KubeViewApp()
    loop = asyncio.get_running_loop()

    shutdown_task: asyncio.Task[None] | None = None

    def _request_shutdown() -> None:
        nonlocal shutdown_task
        if shutdown_task is None:
            shutdown_task = asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app._running and app.serving:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if shutdown_task is not None:
            await shutdown_task
        elif app._running:
            await app.stop()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())
