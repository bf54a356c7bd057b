# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Message protocol between the page context, the background service and the popup.

A closed, ``type``-discriminated set:

- ``CHECK_PAGE``   – analyze the site for ``domain``
- ``SCAN_RESULT``  – an analysis finished (``result`` + analyzed ``url``)
- ``GET_RESULT``   – ask for the cached result of ``domain``
- ``FORCE_RESCAN`` – drop the cached result and analyze again

Inbound payloads that fail validation are logged and dropped; they never
become pipeline errors.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import Field, TypeAdapter, ValidationError

from .errors import MessageError, MessageFailure
from .schemas import ScoringResult, ShieldModel

logger = logging.getLogger(__name__)


class CheckPageMessage(ShieldModel):
    type: Literal["CHECK_PAGE"] = "CHECK_PAGE"
    domain: str = Field(min_length=1)
    url: str | None = None  # page to analyze; defaults to the domain root


class ScanResultMessage(ShieldModel):
    type: Literal["SCAN_RESULT"] = "SCAN_RESULT"
    domain: str = Field(min_length=1)
    result: ScoringResult
    url: str


class GetResultMessage(ShieldModel):
    type: Literal["GET_RESULT"] = "GET_RESULT"
    domain: str = Field(min_length=1)


class ForceRescanMessage(ShieldModel):
    type: Literal["FORCE_RESCAN"] = "FORCE_RESCAN"
    domain: str = Field(min_length=1)
    url: str | None = None


ExtensionMessage = Annotated[
    CheckPageMessage | ScanResultMessage | GetResultMessage | ForceRescanMessage,
    Field(discriminator="type"),
]

_ADAPTER: TypeAdapter[ExtensionMessage] = TypeAdapter(ExtensionMessage)


def parse_message(raw: Any) -> ExtensionMessage | None:
    """Validate an inbound payload.  Invalid input is logged and returns None."""
    try:
        return _ADAPTER.validate_python(raw)
    except ValidationError as e:
        logger.warning("Invalid message dropped (%d errors): %r", e.error_count(), raw)
        return None


def dump_message(message: ExtensionMessage | Mapping[str, Any]) -> dict[str, Any]:
    """Validate an outbound message and return its JSON-ready payload.

    Raises:
        MessageError: ``validation_failed`` if the message does not fit the schema.
    """
    try:
        validated = _ADAPTER.validate_python(message)
    except ValidationError as e:
        raise MessageError(MessageFailure.VALIDATION_FAILED, message) from e
    return _ADAPTER.dump_python(validated, mode="json", by_alias=True)
