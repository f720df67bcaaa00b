"""Secret and ConfigMap sanitization for a scrape result.

The sanitizer mutates the objects it is given.  That is safe because a
ScrapeResult is built per request by the Collector, never shared, and
discarded once the response has been rendered.
"""

from __future__ import annotations

from dataclasses import dataclass

from kubeview.models.resources import RawObject, ResourceKind, ScrapeResult
from kubeview.observability.logging import get_logger
from kubeview.observability.metrics import redactions_total, secrets_filtered_total
from kubeview.sanitizer.redaction import VALUE_SENTINEL, CertificateRedactor

_log = get_logger("sanitizer")

# Helm v3 stores release state in Secrets named sh.helm.release.v1.<release>.v<rev>
RELEASE_SECRET_PREFIX = "sh.helm.release"


@dataclass
class SanitizeReport:
    """What a single sanitize pass removed or replaced."""

    secrets_filtered: int = 0
    secret_values_redacted: int = 0
    secret_certificates_redacted: int = 0
    configmap_certificates_redacted: int = 0


def _name_of(obj: RawObject) -> str:
    metadata = obj.get("metadata") or {}
    return str(metadata.get("name") or "")


def is_release_secret(secret: RawObject) -> bool:
    """True for Helm release bookkeeping Secrets, which are never displayed."""
    return _name_of(secret).startswith(RELEASE_SECRET_PREFIX)


def filter_release_secrets(secrets: list[RawObject]) -> int:
    """Drop release Secrets from *secrets* in place and return how many were dropped."""
    kept = [secret for secret in secrets if not is_release_secret(secret)]
    dropped = len(secrets) - len(kept)
    secrets[:] = kept
    return dropped


def redact_secret(secret: RawObject, redactor: CertificateRedactor) -> int:
    """Redact one Secret in place.

    Every ``data`` and ``stringData`` value becomes ``VALUE_SENTINEL``,
    whatever it contained.  Annotation values only lose their certificate
    blocks.  Returns the number of whole values replaced.
    """
    replaced = 0
    for field_name in ("data", "stringData"):
        mapping = secret.get(field_name)
        if not isinstance(mapping, dict):
            continue
        for key in mapping:
            mapping[key] = VALUE_SENTINEL
            replaced += 1

    annotations = (secret.get("metadata") or {}).get("annotations")
    if isinstance(annotations, dict):
        redactor.redact_tree(annotations)
    return replaced


def redact_config_map(config_map: RawObject, redactor: CertificateRedactor) -> None:
    """Replace certificate blocks in one ConfigMap in place.

    ``data`` values and annotations are plain text.  ``binaryData`` values
    are base64 text in API JSON and raw bytes when built by hand; both are
    handled.
    """
    data = config_map.get("data")
    if isinstance(data, dict):
        redactor.redact_tree(data)

    binary_data = config_map.get("binaryData")
    if isinstance(binary_data, dict):
        for key, value in binary_data.items():
            if isinstance(value, str):
                binary_data[key] = redactor.redact_base64(value)
            else:
                binary_data[key] = redactor.redact_tree(value)

    annotations = (config_map.get("metadata") or {}).get("annotations")
    if isinstance(annotations, dict):
        redactor.redact_tree(annotations)


class Sanitizer:
    """Second pipeline stage: filters and redacts Secrets and ConfigMaps."""

    def sanitize(self, result: ScrapeResult) -> ScrapeResult:
        """Sanitize *result* in place and return the same object."""
        report = SanitizeReport()

        secrets = result.get(ResourceKind.SECRET)
        if secrets is not None:
            report.secrets_filtered = filter_release_secrets(secrets)
            secret_redactor = CertificateRedactor()
            for secret in secrets:
                report.secret_values_redacted += redact_secret(secret, secret_redactor)
            report.secret_certificates_redacted = secret_redactor.replaced

        config_maps = result.get(ResourceKind.CONFIG_MAP)
        if config_maps is not None:
            cm_redactor = CertificateRedactor()
            for config_map in config_maps:
                redact_config_map(config_map, cm_redactor)
            report.configmap_certificates_redacted = cm_redactor.replaced

        secrets_filtered_total.inc(report.secrets_filtered)
        redactions_total.labels(kind=ResourceKind.SECRET.value).inc(
            report.secret_values_redacted + report.secret_certificates_redacted
        )
        redactions_total.labels(kind=ResourceKind.CONFIG_MAP.value).inc(report.configmap_certificates_redacted)

        _log.debug(
            "scrape_sanitized",
            secrets_filtered=report.secrets_filtered,
            secret_values_redacted=report.secret_values_redacted,
            secret_certificates_redacted=report.secret_certificates_redacted,
            configmap_certificates_redacted=report.configmap_certificates_redacted,
        )
        return result
