"""FastAPI application factory for KubeView.

Usage::

    from kubeview.api.app import create_app

    app = create_app(
        pipeline=pipeline,
        reader=reader,
        config=config,
        health=health,
    )

The factory is designed for use by both the production bootstrap
(``kubeview.app``) and unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from kubeview.api.routes import CORS_HEADERS, probe_router, router
from kubeview.api.schemas import ErrorResponse
from kubeview.errors import ScrapeTimeoutError, SerializationError, UpstreamQueryError
from kubeview.models.resources import WILDCARD_NAMESPACE
from kubeview.observability.status import BuildInfo, HealthFlag

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api"


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
        headers=CORS_HEADERS,
    )


def create_app(
    pipeline: Any,
    reader: Any,
    config: Any = None,
    health: HealthFlag | None = None,
    build: BuildInfo | None = None,
) -> FastAPI:
    """Create and configure the KubeView FastAPI application.

    Args:
        pipeline: ScrapePipeline serving ``/api/scrape/{namespace}``.
        reader:   ClusterReader serving ``/api/namespaces``.
        config:   KubeViewConfig.  Used for the namespace scope and build info.
        health:   Process-wide HealthFlag.  Healthy by default when omitted.
        build:    Build metadata.  Derived from the package version when omitted.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from kubeview import __version__

    namespace_scope = WILDCARD_NAMESPACE
    build_info = "No build info"
    if config is not None:
        namespace_scope = config.cluster.namespace_scope or WILDCARD_NAMESPACE
        build_info = config.build_info

    app = FastAPI(
        title="KubeView",
        summary="Kubernetes cluster visualization API",
        version=__version__,
        description=(
            "KubeView scrapes the workloads, networking, storage and configuration "
            "objects of a namespace and returns them, redacted, as one JSON document."
        ),
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Store dependencies in app.state so route handlers can access them
    # without module-level globals.
    app.state.pipeline = pipeline
    app.state.reader = reader
    app.state.config = config
    app.state.namespace_scope = namespace_scope
    app.state.health = health if health is not None else HealthFlag(healthy=True)
    app.state.build = build if build is not None else BuildInfo(version=__version__, build_info=build_info)

    app.include_router(probe_router)
    app.include_router(router, prefix=_API_PREFIX)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors (only the namespace path) to our error envelope."""
        errors = exc.errors()
        first_msg = str(errors[0].get("msg", "")) if errors else ""
        return _error(400, "INVALID_NAMESPACE", first_msg)

    @app.exception_handler(UpstreamQueryError)
    async def upstream_exception_handler(
        request: Request,
        exc: UpstreamQueryError,
    ) -> JSONResponse:
        """A cluster API call failed: the whole request fails with its message."""
        _log.error(
            "kubernetes_api_error",
            path=str(request.url.path),
            kind=exc.kind,
            namespace=exc.namespace,
            error=exc.message,
        )
        return _error(500, "UPSTREAM_QUERY_FAILED", exc.message)

    @app.exception_handler(ScrapeTimeoutError)
    async def timeout_exception_handler(
        request: Request,
        exc: ScrapeTimeoutError,
    ) -> JSONResponse:
        _log.error("scrape_timeout", path=str(request.url.path), timeout=exc.timeout_seconds)
        return _error(504, "SCRAPE_TIMEOUT", exc.message)

    @app.exception_handler(SerializationError)
    async def serialization_exception_handler(
        request: Request,
        exc: SerializationError,
    ) -> JSONResponse:
        """Encoding failed: log the cause, return nothing about it."""
        _log.error("envelope_serialization_failed", path=str(request.url.path), error=exc.message)
        return _error(500, "INTERNAL_ERROR", "An unexpected error occurred.")

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions; never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return _error(500, "INTERNAL_ERROR", "An unexpected error occurred.")

    return app
