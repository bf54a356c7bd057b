# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page relevance classifier — is the current page a legal/company page?

Two stateless strategies, tried in order; the first success wins:

  1. URL      – path regexes for legal/privacy/terms/about pages (EN/DE/FR/ES/IT)
  2. Content  – keywords in title + first heading + first 1,000 body chars

Each strategy raises ``DetectionError`` on a miss (``no_url_match`` /
``no_content_match``).  ``detect_current_page`` absorbs those and returns
``None``: "this page is not obviously relevant", never a pipeline failure.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from urllib.parse import urlparse

from .document import PageDocument
from .errors import DetectionError, DetectionFailure
from .normalize import collapse_whitespace, strip_html
from .schemas import DetectionResult, PageType

logger = logging.getLogger(__name__)

CONTENT_PREVIEW_LENGTH = 1_000

# ---------------------------------------------------------------------------
# URL strategy
# ---------------------------------------------------------------------------

RELEVANT_URL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"/about",
        r"/company",
        r"/contact",
        r"/impressum",
        r"/ueber-uns",
        r"/terms",
        r"/tos\b",
        r"/privacy",
        r"/legal",
        r"/cookie-policy",
        r"/cookies?\b",
        r"/agb\b",
        r"/datenschutz",
        r"/cgv\b",
        r"/cgu\b",
        r"/aviso-legal",
        r"/informativa-privacy",
        r"/mentions-legales",
        r"/politica-de-privacidad",
        r"/politique-de-confidentialite",
        r"/note-legali",
        r"/condizioni",
    )
)

# (page type, keywords) in precedence order; anything else relevant is "legal".
_URL_TYPE_KEYWORDS: tuple[tuple[PageType, re.Pattern[str]], ...] = (
    (PageType.TOS, re.compile(r"terms|\btos\b|agb|cgv|cgu|condizioni|conditions", re.IGNORECASE)),
    (
        PageType.PRIVACY,
        re.compile(r"privacy|datenschutz|confidentialite|privacidad", re.IGNORECASE),
    ),
    (PageType.COOKIE, re.compile(r"cookie", re.IGNORECASE)),
)

# ---------------------------------------------------------------------------
# Content strategy
# ---------------------------------------------------------------------------

CONTENT_KEYWORDS: tuple[str, ...] = (
    # en
    "privacy",
    "policy",
    "terms",
    "conditions",
    "cookie",
    "legal notice",
    # de
    "datenschutz",
    "impressum",
    "agb",
    "avb",
    "nutzungsbedingungen",
    # fr
    "politique de confidentialité",
    "mentions légales",
    "cgv",
    "conditions générales",
    # es
    "política de privacidad",
    "aviso legal",
    "términos y condiciones",
    # it
    "informativa sulla privacy",
    "note legali",
    "termini e condizioni",
)

_CONTENT_TYPE_KEYWORDS: tuple[tuple[PageType, tuple[str, ...]], ...] = (
    (PageType.TOS, ("terms", "conditions", "agb", "nutzungsbedingungen", "términos", "termini", "condizioni")),
    (PageType.PRIVACY, ("privacy", "datenschutz", "confidentialité", "privacidad")),
    (PageType.COOKIE, ("cookie",)),
)


def url_page_type(path: str) -> PageType:
    """Page type for a URL path already known to be relevant."""
    for page_type, keyword_re in _URL_TYPE_KEYWORDS:
        if keyword_re.search(path):
            return page_type
    return PageType.LEGAL


def content_page_type(content: str) -> PageType:
    """Page type from free text (title, heading, preview)."""
    lowered = content.lower()
    for page_type, keywords in _CONTENT_TYPE_KEYWORDS:
        if any(k in lowered for k in keywords):
            return page_type
    return PageType.LEGAL


def match_current_url(url: str, document: PageDocument | None = None) -> DetectionResult:
    """URL strategy: first matching path pattern wins.

    Raises:
        DetectionError: ``no_url_match`` when no pattern matches the path.
    """
    path = urlparse(url).path or "/"
    if not any(p.search(path) for p in RELEVANT_URL_PATTERNS):
        raise DetectionError(DetectionFailure.NO_URL_MATCH)

    text = strip_html(document.body_html) if document is not None else ""
    return DetectionResult(detected=True, type=url_page_type(path), url=url, text=text)


def match_page_content(url: str, document: PageDocument | None = None) -> DetectionResult:
    """Content strategy: look for legal keywords near the top of the page.

    Raises:
        DetectionError: ``no_content_match`` when no document is available or
            none of the keywords appear.
    """
    if document is None:
        raise DetectionError(DetectionFailure.NO_CONTENT_MATCH)

    preview = document.body_text[:CONTENT_PREVIEW_LENGTH]
    content = collapse_whitespace(f"{document.title} {document.first_heading} {preview}")
    lowered = content.lower()
    if not any(k in lowered for k in CONTENT_KEYWORDS):
        raise DetectionError(DetectionFailure.NO_CONTENT_MATCH)

    return DetectionResult(detected=True, type=content_page_type(content), url=url, text=content)


Strategy = Callable[[str, PageDocument | None], DetectionResult]

STRATEGIES: tuple[Strategy, ...] = (match_current_url, match_page_content)


def detect_current_page(url: str, document: PageDocument | None = None) -> DetectionResult | None:
    """Run strategies in order; ``None`` when none of them recognises the page."""
    for strategy in STRATEGIES:
        try:
            return strategy(url, document)
        except DetectionError as e:
            logger.debug("%s: %s", strategy.__name__, e.reason)
    return None
