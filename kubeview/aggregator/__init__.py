"""Aggregator package for KubeView: envelope assembly and JSON rendering."""

from kubeview.aggregator.envelope import ENVELOPE_KEYS, build_envelope, render_envelope

__all__ = ["ENVELOPE_KEYS", "build_envelope", "render_envelope"]
