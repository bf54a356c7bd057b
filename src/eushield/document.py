# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document collaborator — the currently rendered page, when there is one.

``PageDocument`` is what the classifier reads: title, first heading, body
text and body markup.  ``HtmlDocument`` satisfies it from a raw HTML string
via lxml, so a fetched page can stand in for a live browser document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import lxml.html
from lxml import etree

from .normalize import collapse_whitespace

logger = logging.getLogger(__name__)


@runtime_checkable
class PageDocument(Protocol):
    """Read-only view of a rendered page."""

    @property
    def title(self) -> str: ...

    @property
    def first_heading(self) -> str: ...

    @property
    def body_text(self) -> str: ...

    @property
    def body_html(self) -> str: ...


@dataclass(frozen=True, slots=True)
class HtmlDocument:
    """``PageDocument`` backed by a parsed HTML string."""

    title: str = ""
    first_heading: str = ""
    body_text: str = ""
    body_html: str = ""

    @classmethod
    def from_html(cls, html: str) -> HtmlDocument:
        """Parse *html*.  Unparseable input yields an empty document."""
        if not html or not html.strip():
            return cls()
        try:
            root = lxml.html.document_fromstring(html)
        except (etree.ParserError, ValueError):
            logger.debug("HTML parse failed, using empty document", exc_info=True)
            return cls()

        title_el = root.find(".//title")
        h1 = next(iter(root.iter("h1")), None)
        body = root.find("body")
        if body is None:
            body = root

        return cls(
            title=collapse_whitespace(title_el.text_content()) if title_el is not None else "",
            first_heading=collapse_whitespace(h1.text_content()) if h1 is not None else "",
            body_text=body.text_content(),
            body_html=lxml.html.tostring(body, encoding="unicode"),
        )
