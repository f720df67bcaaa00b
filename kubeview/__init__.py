"""KubeView: read-only Kubernetes cluster visualization backend."""

__version__ = "0.2.0"
