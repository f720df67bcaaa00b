"""REST API layer for KubeView: the FastAPI application factory and its routes."""

from kubeview.api.app import create_app

__all__ = ["create_app"]
