# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for eushield.classifier — URL and content strategies."""

from __future__ import annotations

import pytest

from eushield.classifier import (
    CONTENT_PREVIEW_LENGTH,
    detect_current_page,
    match_current_url,
    match_page_content,
    url_page_type,
)
from eushield.document import HtmlDocument
from eushield.errors import DetectionError, DetectionFailure
from eushield.schemas import PageType


def _doc(title: str = "", heading: str = "", body: str = "") -> HtmlDocument:
    return HtmlDocument(title=title, first_heading=heading, body_text=body, body_html=f"<p>{body}</p>")


# ---------------------------------------------------------------------------
# URL strategy
# ---------------------------------------------------------------------------


class TestUrlStrategy:
    @pytest.mark.parametrize(
        "url, page_type",
        [
            ("https://example.com/terms", PageType.TOS),
            ("https://example.com/tos", PageType.TOS),
            ("https://example.de/agb", PageType.TOS),
            ("https://example.fr/cgv", PageType.TOS),
            ("https://example.com/privacy-policy", PageType.PRIVACY),
            ("https://example.de/datenschutz", PageType.PRIVACY),
            ("https://example.fr/politique-de-confidentialite", PageType.PRIVACY),
            ("https://example.com/cookie-policy", PageType.COOKIE),
            ("https://example.com/cookies", PageType.COOKIE),
            ("https://example.de/impressum", PageType.LEGAL),
            ("https://example.com/about-us", PageType.LEGAL),
            ("https://example.com/Contact", PageType.LEGAL),
            ("https://example.es/aviso-legal", PageType.LEGAL),
        ],
    )
    def test_relevant_paths(self, url, page_type):
        result = match_current_url(url)
        assert result.detected is True
        assert result.type == page_type
        assert result.url == url

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/",
            "https://example.com/products/123",
            "https://example.com/photos",
            "https://example.com/search?q=privacy",
            "https://privacy.example.com/",
        ],
    )
    def test_irrelevant_paths(self, url):
        with pytest.raises(DetectionError) as exc_info:
            match_current_url(url)
        assert exc_info.value.reason == DetectionFailure.NO_URL_MATCH

    def test_text_from_document(self):
        doc = HtmlDocument(body_html="<body><script>x()</script><p>Impressum &amp; Kontakt</p></body>")
        result = match_current_url("https://example.de/impressum", doc)
        assert result.text == "Impressum & Kontakt"

    def test_text_empty_without_document(self):
        assert match_current_url("https://example.de/impressum").text == ""

    def test_url_page_type_precedence(self):
        # terms wins over privacy
        assert url_page_type("/terms-and-privacy") == PageType.TOS


# ---------------------------------------------------------------------------
# Content strategy
# ---------------------------------------------------------------------------


class TestContentStrategy:
    def test_keyword_in_title(self):
        result = match_page_content("https://example.com/p/1", _doc(title="Privacy Notice"))
        assert result.detected is True
        assert result.type == PageType.PRIVACY

    def test_keyword_in_heading(self):
        result = match_page_content("https://example.de/x", _doc(heading="Allgemeine Nutzungsbedingungen"))
        assert result.type == PageType.TOS

    @pytest.mark.parametrize(
        "title, page_type",
        [
            ("Mentions légales", PageType.LEGAL),
            ("Aviso legal", PageType.LEGAL),
            ("Note legali", PageType.LEGAL),
            ("Termini e condizioni", PageType.TOS),
            ("Política de privacidad", PageType.PRIVACY),
            ("Cookie settings", PageType.COOKIE),
        ],
    )
    def test_multilingual_keywords(self, title, page_type):
        assert match_page_content("https://example.eu/x", _doc(title=title)).type == page_type

    def test_only_preview_is_considered(self):
        body = "a" * CONTENT_PREVIEW_LENGTH + " privacy"
        with pytest.raises(DetectionError) as exc_info:
            match_page_content("https://example.com/x", _doc(title="Shop", body=body))
        assert exc_info.value.reason == DetectionFailure.NO_CONTENT_MATCH

    def test_text_is_title_heading_and_preview(self):
        result = match_page_content("https://example.com/x", _doc(title="Legal  notice", heading="Hi", body="Body\ntext"))
        assert result.text == "Legal notice Hi Body text"

    def test_no_document(self):
        with pytest.raises(DetectionError) as exc_info:
            match_page_content("https://example.com/x", None)
        assert exc_info.value.reason == DetectionFailure.NO_CONTENT_MATCH

    def test_no_keywords(self):
        with pytest.raises(DetectionError):
            match_page_content("https://example.com/x", _doc(title="Spring sale", body="Buy now"))


# ---------------------------------------------------------------------------
# Strategy chain
# ---------------------------------------------------------------------------


class TestDetectCurrentPage:
    def test_url_strategy_wins(self):
        doc = _doc(title="Cookie settings", body="cookie text")
        result = detect_current_page("https://example.com/terms", doc)
        assert result is not None
        assert result.type == PageType.TOS

    def test_falls_back_to_content(self):
        result = detect_current_page("https://example.com/page", _doc(title="Datenschutz"))
        assert result is not None
        assert result.type == PageType.PRIVACY

    def test_absent_is_none_not_error(self):
        assert detect_current_page("https://example.com/page", _doc(title="Home")) is None
        assert detect_current_page("https://example.com/page") is None
