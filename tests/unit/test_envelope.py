"""Tests for envelope assembly and JSON rendering."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from kubeview.aggregator import ENVELOPE_KEYS, build_envelope, render_envelope
from kubeview.errors import SerializationError
from kubeview.models.resources import ResourceKind


class TestBuildEnvelope:
    def test_key_order(self) -> None:
        assert ENVELOPE_KEYS == (
            "pods",
            "services",
            "endpoints",
            "persistentvolumes",
            "persistentvolumeclaims",
            "deployments",
            "daemonsets",
            "replicasets",
            "statefulsets",
            "ingresses",
            "configmaps",
            "secrets",
        )

    def test_missing_kinds_become_empty_lists(self) -> None:
        pods = [{"metadata": {"name": "web"}}]

        envelope = build_envelope({ResourceKind.POD: pods})

        assert tuple(envelope) == ENVELOPE_KEYS
        assert envelope["pods"] is pods
        assert all(envelope[key] == [] for key in ENVELOPE_KEYS if key != "pods")

    def test_none_becomes_empty_list(self) -> None:
        envelope = build_envelope({ResourceKind.INGRESS: None})  # type: ignore[dict-item]
        assert envelope["ingresses"] == []


class TestRenderEnvelope:
    def test_compact_utf8_json(self) -> None:
        envelope = build_envelope({ResourceKind.CONFIG_MAP: [{"data": {"greeting": "grüße"}}]})

        body = render_envelope(envelope)

        assert isinstance(body, bytes)
        assert b" " not in body
        assert "grüße".encode() in body
        assert list(json.loads(body)) == list(ENVELOPE_KEYS)

    def test_bytes_rendered_as_base64(self) -> None:
        envelope = build_envelope({ResourceKind.CONFIG_MAP: [{"binaryData": {"blob": b"\x00\x01"}}]})
        body = json.loads(render_envelope(envelope))
        assert body["configmaps"][0]["binaryData"]["blob"] == "AAE="

    def test_datetime_rendered_as_iso(self) -> None:
        created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        envelope = build_envelope({ResourceKind.POD: [{"metadata": {"creationTimestamp": created}}]})
        body = json.loads(render_envelope(envelope))
        assert body["pods"][0]["metadata"]["creationTimestamp"] == "2024-05-01T12:00:00+00:00"

    @pytest.mark.parametrize("bad_value", [float("nan"), float("inf"), object(), {1, 2}])
    def test_unrepresentable_values_raise(self, bad_value: object) -> None:
        envelope = build_envelope({ResourceKind.POD: [{"spec": {"value": bad_value}}]})

        with pytest.raises(SerializationError):
            render_envelope(envelope)

    def test_cycle_raises(self) -> None:
        pod: dict = {"metadata": {"name": "loop"}}
        pod["self"] = pod

        with pytest.raises(SerializationError):
            render_envelope(build_envelope({ResourceKind.POD: [pod]}))

    def test_lone_surrogate_raises(self) -> None:
        envelope = build_envelope({ResourceKind.POD: [{"metadata": {"name": "\ud800"}}]})

        with pytest.raises(SerializationError):
            render_envelope(envelope)
