# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""EU Shield exception hierarchy.

All EU Shield errors inherit from ShieldError.  Each subclass carries a
``reason`` StrEnum so callers can branch on the failure kind without
parsing messages.

Recovery boundaries:
- ProbeError: recovered inside the prober (a failing path contributes nothing)
- DetectionError: no_url_match / no_content_match recovered inside the
  classifier chain; only no_pages_found leaves the orchestrator
- CacheError / MessageError: collaborator failures, never fatal to the user flow
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ProbeFailure(StrEnum):
    FETCH_FAILED = "fetch_failed"
    NOT_HTML = "not_html"
    TOO_SHORT = "too_short"
    TIMEOUT = "timeout"


class DetectionFailure(StrEnum):
    NO_URL_MATCH = "no_url_match"
    NO_CONTENT_MATCH = "no_content_match"
    NO_PAGES_FOUND = "no_pages_found"


class CacheFailure(StrEnum):
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"
    VALIDATION_FAILED = "validation_failed"


class MessageFailure(StrEnum):
    VALIDATION_FAILED = "validation_failed"


class ShieldError(Exception):
    """Base exception for all EU Shield errors."""


class CatalogError(ShieldError):
    """Signal catalog failed validation (startup-fatal)."""


class ProbeError(ShieldError):
    """A single well-known path could not be used."""

    def __init__(self, path: str, reason: ProbeFailure) -> None:
        super().__init__(f"probe {path} failed: {reason}")
        self.path = path
        self.reason = reason


class DetectionError(ShieldError):
    """Page detection produced nothing usable."""

    def __init__(self, reason: DetectionFailure) -> None:
        super().__init__(f"detection failed: {reason}")
        self.reason = reason


class CacheError(ShieldError):
    """Result cache read/write/validation failure."""

    def __init__(self, reason: CacheFailure, domain: str) -> None:
        super().__init__(f"cache {reason} for {domain}")
        self.reason = reason
        self.domain = domain


class MessageError(ShieldError):
    """Message payload failed validation or could not be delivered."""

    def __init__(self, reason: MessageFailure, raw: Any = None) -> None:
        super().__init__(f"message {reason}")
        self.reason = reason
        self.raw = raw
