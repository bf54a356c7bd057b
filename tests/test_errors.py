# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for eushield.errors — exception hierarchy and reason codes."""

from __future__ import annotations

import pytest

from eushield.errors import (
    CacheError,
    CacheFailure,
    CatalogError,
    DetectionError,
    DetectionFailure,
    MessageError,
    MessageFailure,
    ProbeError,
    ProbeFailure,
    ShieldError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            CatalogError("bad"),
            ProbeError("/about", ProbeFailure.TIMEOUT),
            DetectionError(DetectionFailure.NO_PAGES_FOUND),
            CacheError(CacheFailure.READ_FAILED, "example.de"),
            MessageError(MessageFailure.VALIDATION_FAILED),
        ],
    )
    def test_all_are_shield_errors(self, exc):
        assert isinstance(exc, ShieldError)


class TestReasons:
    def test_reason_values_are_wire_strings(self):
        assert ProbeFailure.NOT_HTML == "not_html"
        assert DetectionFailure.NO_URL_MATCH == "no_url_match"
        assert CacheFailure.VALIDATION_FAILED == "validation_failed"
        assert MessageFailure.VALIDATION_FAILED == "validation_failed"

    def test_probe_error_carries_path_and_reason(self):
        e = ProbeError("/impressum", ProbeFailure.TOO_SHORT)
        assert e.path == "/impressum"
        assert e.reason is ProbeFailure.TOO_SHORT
        assert "too_short" in str(e)

    def test_cache_error_carries_domain(self):
        e = CacheError(CacheFailure.WRITE_FAILED, "example.de")
        assert e.domain == "example.de"
        assert str(e) == "cache write_failed for example.de"

    def test_message_error_keeps_raw_payload(self):
        raw = {"type": "BOGUS"}
        assert MessageError(MessageFailure.VALIDATION_FAILED, raw).raw is raw
