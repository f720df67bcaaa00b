"""Logging, status and metrics for KubeView.

Submodules:
    logging  -- structlog configuration and component-bound loggers.
    status   -- Immutable build metadata and the process-wide health flag.
    metrics  -- Prometheus counters and histograms for the scrape pipeline.
"""
