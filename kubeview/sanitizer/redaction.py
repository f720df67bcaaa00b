"""Redaction primitives: sentinels, the PEM certificate pattern and the tree walker.

Two redaction modes exist:

* Whole-value replacement: the value is discarded and replaced with
  ``VALUE_SENTINEL``.  Used for Secret ``data`` and ``stringData``.
* Certificate replacement: every PEM certificate block inside a string or
  byte value is replaced with ``CERTIFICATE_SENTINEL``; the text around it is
  left byte-for-byte intact.  Used for annotations and ConfigMap values.

Neither sentinel contains a dash, so the certificate pattern can never match
redacted output and running the redactor twice is a no-op.
"""

from __future__ import annotations

import base64
import binascii
import re
from enum import StrEnum
from typing import Any

VALUE_SENTINEL = "__VALUE REDACTED__"
CERTIFICATE_SENTINEL = "__CERTIFICATE REDACTED__"

# BEGIN marker through the nearest END marker.  PEM bodies never contain a
# dash, so the body class stops a match from running into a second block.
# Extra closing dashes are consumed only while they do not lead into the next
# BEGIN marker, so back-to-back blocks are each matched.
_CERTIFICATE_PATTERN = (
    r"-{5,}BEGIN\s+CERTIFICATE-{5,}[^-]+?-{5,}END\s+CERTIFICATE-{5}(?:-(?!-*BEGIN\s+CERTIFICATE))*"
)

_RE_CERTIFICATE = re.compile(_CERTIFICATE_PATTERN, re.IGNORECASE)
_RE_CERTIFICATE_BYTES = re.compile(_CERTIFICATE_PATTERN.encode("ascii"), re.IGNORECASE)
_CERTIFICATE_SENTINEL_BYTES = CERTIFICATE_SENTINEL.encode("ascii")


class NodeKind(StrEnum):
    """Closed set of node kinds visited by the tree walker."""

    MAPPING = "mapping"
    SEQUENCE = "sequence"
    STRING_LEAF = "string_leaf"
    BYTES_LEAF = "bytes_leaf"
    OTHER_LEAF = "other_leaf"


def classify(node: object) -> NodeKind:
    """Return the walker's node kind for *node*."""
    if isinstance(node, dict):
        return NodeKind.MAPPING
    if isinstance(node, list):
        return NodeKind.SEQUENCE
    if isinstance(node, str):
        return NodeKind.STRING_LEAF
    if isinstance(node, (bytes, bytearray)):
        return NodeKind.BYTES_LEAF
    return NodeKind.OTHER_LEAF


def contains_certificate(value: str | bytes) -> bool:
    """True when *value* holds at least one complete PEM certificate block."""
    if isinstance(value, str):
        return _RE_CERTIFICATE.search(value) is not None
    return _RE_CERTIFICATE_BYTES.search(value) is not None


class CertificateRedactor:
    """Stateful certificate redactor that counts the blocks it replaces.

    One instance is used per request so the count can be reported once the
    whole scrape result has been sanitized.
    """

    def __init__(self) -> None:
        self.replaced = 0

    def redact_text(self, text: str) -> str:
        redacted, count = _RE_CERTIFICATE.subn(CERTIFICATE_SENTINEL, text)
        self.replaced += count
        return redacted

    def redact_bytes(self, data: bytes) -> bytes:
        redacted, count = _RE_CERTIFICATE_BYTES.subn(_CERTIFICATE_SENTINEL_BYTES, bytes(data))
        self.replaced += count
        return redacted

    def redact_base64(self, value: str) -> str:
        """Redact certificates inside a base64-encoded binary value.

        The value is decoded, redacted and re-encoded.  Line-wrapped base64
        is accepted; the re-encoded value is unwrapped.  A value without a
        certificate is returned untouched, so encoding differences (padding,
        line breaks) never alter unredacted values.  Text that is not valid
        base64 is redacted as plain text.
        """
        try:
            decoded = base64.b64decode("".join(value.split()), validate=True)
        except (binascii.Error, ValueError):
            return self.redact_text(value)

        if not contains_certificate(decoded):
            return value
        return base64.b64encode(self.redact_bytes(decoded)).decode("ascii")

    def redact_tree(self, node: Any) -> Any:
        """Walk *node* and redact certificates in every string and byte leaf.

        Mappings and sequences are rewritten in place and returned as the
        same object; leaves are returned as their redacted replacement.
        Mapping keys are never touched.
        """
        kind = classify(node)
        if kind is NodeKind.MAPPING:
            for key, value in node.items():
                node[key] = self.redact_tree(value)
            return node
        if kind is NodeKind.SEQUENCE:
            for index, value in enumerate(node):
                node[index] = self.redact_tree(value)
            return node
        if kind is NodeKind.STRING_LEAF:
            return self.redact_text(node)
        if kind is NodeKind.BYTES_LEAF:
            return self.redact_bytes(node)
        return node
