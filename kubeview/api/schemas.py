"""Pydantic response models for the KubeView REST API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-2xx JSON response."""

    error: str
    detail: str


class ConfigResponse(BaseModel):
    """Namespace scope handed to the frontend."""

    model_config = ConfigDict(populate_by_name=True)

    namespace_scope: str = Field(alias="NamespaceScope")


class StatusResponse(BaseModel):
    """Build and runtime status of this process."""

    model_config = ConfigDict(populate_by_name=True)

    healthy: bool
    version: str
    build_info: str = Field(alias="buildInfo")
    hostname: str
    os: str
    architecture: str
    cpu_count: int = Field(alias="cpuCount")
    python_version: str = Field(alias="pythonVersion")
    client_address: str = Field(alias="clientAddress")
    server_host: str = Field(alias="serverHost")
