"""Structured logging configuration using structlog.

Application code logs through structlog directly.  Records emitted by
third-party libraries through the stdlib ``logging`` module (uvicorn,
kubernetes-asyncio, aiohttp) are routed through the same processor chain so
that every line on stderr is a single JSON object.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
]

# Libraries that are chatty at INFO; pinned one level above the app level.
_NOISY_LOGGERS = ("kubernetes_asyncio", "aiohttp.access", "uvicorn.access")


def setup_logging(level: str = "info") -> None:
    """Configure structlog and the stdlib root logger for JSON output to stderr."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.JSONRenderer(),
            ],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
