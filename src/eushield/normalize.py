# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Raw HTML -> bounded plain text for pattern scoring.

Regex pipeline over untrusted, often malformed markup.  Never raises for
``str`` input.
"""

from __future__ import annotations

import re

MAX_TEXT_LENGTH = 50_000


def _drop_element_re(tag: str, *, unclosed_to_end: bool) -> re.Pattern[str]:
    # Unrolled-loop form: linear time, tolerates stray "<" inside the element body.
    close = rf"</{tag}\s*>"
    end = rf"(?:{close}|\Z)" if unclosed_to_end else close
    return re.compile(rf"<{tag}\b[^<]*(?:(?!{close})<[^<]*)*{end}", re.IGNORECASE)


# An unclosed script or style runs to the end of the input; an unclosed nav keeps the page body.
_DROP_ELEMENT_RES: tuple[re.Pattern[str], ...] = (
    _drop_element_re("script", unclosed_to_end=True),
    _drop_element_re("style", unclosed_to_end=True),
    _drop_element_re("nav", unclosed_to_end=False),
)

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_ENTITY_RE = re.compile(r"&(amp|lt|gt|quot|apos|#\d+);")

_NAMED_ENTITIES: dict[str, str] = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}


def _decode_entity(m: re.Match[str]) -> str:
    name = m.group(1)
    if not name.startswith("#"):
        return _NAMED_ENTITIES[name]
    try:
        return chr(int(name[1:]))
    except (ValueError, OverflowError):
        return m.group(0)


def decode_entities(text: str) -> str:
    """Decode the five core named entities and decimal references in one pass."""
    return _ENTITY_RE.sub(_decode_entity, text)


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def strip_html(html: str) -> str:
    """Strip markup, scripts, styles and navigation; return at most 50,000 chars."""
    text = html
    for element_re in _DROP_ELEMENT_RES:
        text = element_re.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = decode_entities(text)
    return collapse_whitespace(text)[:MAX_TEXT_LENGTH]
