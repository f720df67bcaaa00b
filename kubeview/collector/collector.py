"""First pipeline stage: one list query per resource kind.

All queries for a scrape run concurrently.  The scrape either returns every
kind or raises: the first failed query cancels the rest, and a caller
cancellation or an elapsed deadline aborts whatever is still in flight.
No query is retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from kubeview.collector.reader import ClusterReader
from kubeview.errors import ScrapeTimeoutError, UpstreamQueryError
from kubeview.models.resources import RawObject, ResourceKind, ScrapeResult, resolve_namespace
from kubeview.observability.logging import get_logger
from kubeview.observability.metrics import upstream_query_failures_total

_log = get_logger("collector")


class Collector:
    """Lists every ResourceKind for a namespace selector.

    Args:
        reader:          ClusterReader used for the list calls.
        timeout_seconds: Deadline for a whole scrape.  None disables it.
    """

    def __init__(self, reader: ClusterReader, timeout_seconds: float | None = 30.0) -> None:
        self._reader = reader
        self._timeout = timeout_seconds

    async def collect(self, namespace_selector: str) -> ScrapeResult:
        """Return one list per ResourceKind, exactly as the API returned it.

        Raises:
            UpstreamQueryError: the first query that failed.
            ScrapeTimeoutError: the deadline elapsed first.
        """
        namespace = resolve_namespace(namespace_selector)
        tasks = {
            kind: asyncio.create_task(
                self._fetch(kind, namespace if kind.namespaced else None),
                name=f"list-{kind.value}",
            )
            for kind in ResourceKind
        }
        try:
            async with asyncio.timeout(self._timeout):
                await self._join(tasks)
        except TimeoutError as exc:
            _log.warning("scrape_timed_out", namespace=namespace_selector, timeout=self._timeout)
            raise ScrapeTimeoutError(self._timeout or 0) from exc
        finally:
            await _cancel_pending(tasks.values())

        _log.debug(
            "scrape_collected",
            namespace=namespace_selector,
            counts={kind.envelope_key: len(task.result()) for kind, task in tasks.items()},
        )
        return {kind: task.result() for kind, task in tasks.items()}

    async def _fetch(self, kind: ResourceKind, namespace: str | None) -> list[RawObject]:
        try:
            return await self._reader.list_objects(kind, namespace)
        except UpstreamQueryError as exc:
            upstream_query_failures_total.labels(kind=kind.value).inc()
            _log.warning("upstream_query_failed", kind=kind.value, namespace=namespace, error=exc.message)
            raise
        except Exception as exc:
            upstream_query_failures_total.labels(kind=kind.value).inc()
            _log.warning("upstream_query_failed", kind=kind.value, namespace=namespace, error=str(exc))
            raise UpstreamQueryError(kind.value, namespace, str(exc) or type(exc).__name__) from exc

    async def _join(self, tasks: dict[ResourceKind, asyncio.Task[list[RawObject]]]) -> None:
        """Wait for every task, raising the first failure as soon as it happens."""
        pending: set[asyncio.Task[list[RawObject]]] = set(tasks.values())
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            # Several tasks can fail in the same loop iteration; report them
            # in envelope order so the surfaced error is deterministic.
            failures = [task.exception() for task in tasks.values() if task in done]
            for failure in failures:
                if failure is not None:
                    raise failure


async def _cancel_pending(tasks: Iterable[asyncio.Task[Any]]) -> None:
    """Cancel unfinished tasks and wait for them so no query outlives the scrape."""
    remaining = [task for task in tasks if not task.done()]
    for task in remaining:
        task.cancel()
    if remaining:
        await asyncio.gather(*remaining, return_exceptions=True)
