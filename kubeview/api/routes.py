"""Route handlers for the KubeView REST API.

Endpoints:
    GET /healthz                  -- 204 when healthy, 503 otherwise.
    GET /metrics                  -- Prometheus exposition.
    GET /api/status               -- Build and runtime status.
    GET /api/config               -- Namespace scope for the frontend.
    GET /api/namespaces           -- Namespaces in the cluster.
    GET /api/scrape/{namespace}   -- Sanitized scrape envelope.

Dependencies are read from ``request.app.state`` (see ``create_app``).
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from kubeview.api.schemas import ConfigResponse, StatusResponse
from kubeview.observability.status import build_status

# Any origin may read the data endpoints; the frontend can be served elsewhere.
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}

NAMESPACE_SELECTOR_PATTERN = r"^(\*|[a-z0-9]([-a-z0-9]{0,61}[a-z0-9])?)$"

probe_router = APIRouter()
router = APIRouter()


@probe_router.get("/healthz", status_code=204, response_class=Response)
async def healthz(request: Request) -> Response:
    """Liveness/readiness probe."""
    if request.app.state.health.healthy:
        return Response(status_code=204)
    return Response(status_code=503)


@probe_router.get("/metrics", response_class=Response)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    client_address = f"{request.client.host}:{request.client.port}" if request.client else ""
    document = build_status(
        request.app.state.build,
        request.app.state.health,
        client_address=client_address,
        server_host=request.headers.get("host", ""),
    )
    return StatusResponse.model_validate(document)


@router.get("/config", response_model=ConfigResponse)
async def config(request: Request) -> JSONResponse:
    body = ConfigResponse(namespace_scope=request.app.state.namespace_scope)
    return JSONResponse(content=body.model_dump(by_alias=True), headers=CORS_HEADERS)


@router.get("/namespaces")
async def namespaces(request: Request) -> JSONResponse:
    """List namespaces; failures surface as UPSTREAM_QUERY_FAILED."""
    items = await request.app.state.reader.list_namespaces()
    return JSONResponse(content=items, headers=CORS_HEADERS)


@router.get("/scrape/{namespace}")
async def scrape(
    request: Request,
    namespace: Annotated[str, Path(pattern=NAMESPACE_SELECTOR_PATTERN, max_length=63)],
) -> Response:
    """Scrape one namespace (or ``*`` for all) and return the sanitized envelope.

    The body is rendered by the pipeline itself so serialization failures
    are reported as SerializationError rather than escaping from Starlette.
    """
    body = await request.app.state.pipeline.run(namespace)
    return Response(content=body, media_type="application/json", headers=CORS_HEADERS)
