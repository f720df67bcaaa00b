"""Prometheus metrics for the scrape pipeline."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

scrape_requests_total = Counter(
    "kubeview_scrape_requests_total",
    "Scrape requests by outcome",
    ["outcome"],
)

scrape_duration_seconds = Histogram(
    "kubeview_scrape_duration_seconds",
    "Wall-clock time of a full scrape (collect, sanitize, render)",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

upstream_query_failures_total = Counter(
    "kubeview_upstream_query_failures_total",
    "Failed cluster API list calls by resource kind",
    ["kind"],
)

secrets_filtered_total = Counter(
    "kubeview_secrets_filtered_total",
    "Helm release secrets dropped before redaction",
)

redactions_total = Counter(
    "kubeview_redactions_total",
    "Values replaced by a redaction sentinel, by resource kind",
    ["kind"],
)
