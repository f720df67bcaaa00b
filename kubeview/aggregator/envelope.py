"""Scrape envelope assembly and serialization."""

from __future__ import annotations

import base64
import json
from datetime import date, datetime
from typing import Any

from kubeview.errors import SerializationError
from kubeview.models.resources import ResourceKind, ScrapeEnvelope, ScrapeResult

ENVELOPE_KEYS: tuple[str, ...] = tuple(kind.envelope_key for kind in ResourceKind)


def build_envelope(result: ScrapeResult) -> ScrapeEnvelope:
    """Map a sanitized ScrapeResult onto the envelope keys.

    Every key is present; a kind missing from *result* yields an empty list.
    Lists are reused as-is, keeping the order the API returned them in.
    """
    envelope: ScrapeEnvelope = {}
    for kind in ResourceKind:
        objects = result.get(kind)
        envelope[kind.envelope_key] = objects if objects is not None else []
    return envelope


def _encode_default(value: Any) -> Any:
    # Raw byte blobs serialize as base64 text, the same form the API uses.
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def render_envelope(envelope: ScrapeEnvelope) -> bytes:
    """Encode *envelope* as compact UTF-8 JSON.

    Raises:
        SerializationError: the envelope holds a cycle, NaN/Infinity, a lone
            surrogate or a value JSON cannot represent.
    """
    try:
        text = json.dumps(
            envelope,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
            default=_encode_default,
        )
        return text.encode("utf-8")
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationError(f"Failed to encode scrape envelope: {exc}") from exc
