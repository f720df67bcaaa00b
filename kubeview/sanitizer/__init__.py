"""Sanitizer package for KubeView.

Removes Helm release Secrets and redacts Secret values and embedded
certificates before a scrape result leaves the process.

Submodules:
    redaction -- Sentinels, the PEM certificate pattern and the tree walker.
    sanitizer -- Sanitizer stage: release filtering, Secret and ConfigMap redaction.
"""

from kubeview.sanitizer.redaction import (
    CERTIFICATE_SENTINEL,
    VALUE_SENTINEL,
    CertificateRedactor,
)
from kubeview.sanitizer.sanitizer import RELEASE_SECRET_PREFIX, Sanitizer

__all__ = [
    "CERTIFICATE_SENTINEL",
    "CertificateRedactor",
    "RELEASE_SECRET_PREFIX",
    "Sanitizer",
    "VALUE_SENTINEL",
]
