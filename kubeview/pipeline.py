"""Per-request scrape pipeline: Collector -> Sanitizer -> Aggregator."""

from __future__ import annotations

import asyncio
import time

from kubeview.aggregator import build_envelope, render_envelope
from kubeview.collector import Collector
from kubeview.errors import ScrapeTimeoutError, SerializationError, UpstreamQueryError
from kubeview.observability.logging import get_logger
from kubeview.observability.metrics import scrape_duration_seconds, scrape_requests_total
from kubeview.sanitizer import Sanitizer

_log = get_logger("pipeline")


class ScrapePipeline:
    """Runs one complete scrape and returns the rendered JSON body.

    Holds no per-request state, so one instance serves every concurrent
    request.
    """

    def __init__(self, collector: Collector, sanitizer: Sanitizer | None = None) -> None:
        self._collector = collector
        self._sanitizer = sanitizer or Sanitizer()

    async def run(self, namespace_selector: str) -> bytes:
        """Scrape *namespace_selector* and return the envelope as JSON bytes.

        Raises:
            UpstreamQueryError: any list query failed; nothing is returned.
            ScrapeTimeoutError: the scrape deadline elapsed.
            SerializationError: the envelope could not be encoded.
        """
        t_start = time.monotonic()
        outcome = "error"
        try:
            result = await self._collector.collect(namespace_selector)
            self._sanitizer.sanitize(result)
            body = render_envelope(build_envelope(result))
            outcome = "success"
            return body
        except UpstreamQueryError:
            outcome = "upstream_error"
            raise
        except ScrapeTimeoutError:
            outcome = "timeout"
            raise
        except SerializationError:
            outcome = "serialization_error"
            raise
        except asyncio.CancelledError:
            outcome = "cancelled"
            raise
        finally:
            duration = time.monotonic() - t_start
            scrape_requests_total.labels(outcome=outcome).inc()
            scrape_duration_seconds.observe(duration)
            _log.info(
                "scrape_completed",
                namespace=namespace_selector,
                outcome=outcome,
                duration_ms=round(duration * 1000.0, 1),
            )
