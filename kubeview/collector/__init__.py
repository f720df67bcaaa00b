"""Collector package for KubeView.

Lists every scraped resource kind from the cluster API for one request.

Submodules
----------
reader    -- ClusterReader protocol and the kubernetes-asyncio implementation.
collector -- Collector: concurrent, fail-fast list queries with a scrape deadline.
"""

from kubeview.collector.collector import Collector
from kubeview.collector.reader import ClusterReader, KubernetesClusterReader, create_api_client

__all__ = ["ClusterReader", "Collector", "KubernetesClusterReader", "create_api_client"]
