"""Exceptions raised by the scrape pipeline."""

from __future__ import annotations


class KubeViewError(Exception):
    """Base exception class for KubeView."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class UpstreamQueryError(KubeViewError):
    """A cluster API list call failed (network, auth, not found, forbidden).

    ``message`` carries the underlying error text and is returned to the
    caller as-is.
    """

    def __init__(self, kind: str, namespace: str | None, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.namespace = namespace


class ScrapeTimeoutError(KubeViewError):
    """The scrape deadline elapsed before every query completed."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Scrape did not complete within {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class SerializationError(KubeViewError):
    """The scrape envelope could not be encoded as JSON."""
