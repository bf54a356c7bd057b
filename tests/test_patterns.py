# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for eushield.patterns — the signal catalog."""

from __future__ import annotations

import re

import pytest

from eushield.errors import CatalogError
from eushield.patterns import (
    EU_COUNTRIES,
    EU_POSITIVE_PATTERNS,
    PATTERNS,
    RED_FLAG_PATTERNS,
    build_catalog,
)
from eushield.schemas import SignalCategory

_BY_ID = {p.id: p for p in PATTERNS}


def _matches(pattern_id: str, text: str) -> int:
    return _BY_ID[pattern_id].count_matches(text)


# ---------------------------------------------------------------------------
# Catalog shape
# ---------------------------------------------------------------------------


class TestCatalogShape:
    def test_entry_counts(self):
        assert len(EU_POSITIVE_PATTERNS) == 15
        assert len(RED_FLAG_PATTERNS) == 5
        assert len(PATTERNS) == 20

    def test_ids_unique(self):
        ids = [p.id for p in PATTERNS]
        assert len(ids) == len(set(ids))

    def test_categories_assigned(self):
        assert all(p.category == SignalCategory.EU_POSITIVE for p in EU_POSITIVE_PATTERNS)
        assert all(p.category == SignalCategory.RED_FLAG for p in RED_FLAG_PATTERNS)

    def test_weight_signs_follow_category(self):
        assert all(p.weight > 0 for p in EU_POSITIVE_PATTERNS)
        assert all(p.weight < 0 for p in RED_FLAG_PATTERNS)

    def test_catalog_order(self):
        assert [p.id for p in PATTERNS][:3] == ["eu_jurisdiction", "eu_registered", "eu_headquarters"]
        assert [p.id for p in RED_FLAG_PATTERNS] == [
            "us_jurisdiction",
            "us_registered",
            "non_eu_hq",
            "binding_arbitration",
            "data_selling",
        ]

    def test_every_entry_has_compiled_rules(self):
        for p in PATTERNS:
            assert p.rules
            assert all(isinstance(r, re.Pattern) for r in p.rules)

    def test_country_list_covers_eea(self):
        for name in ("Germany", "France", "Czechia", "Norway", "Iceland", "Liechtenstein", "Deutschland"):
            assert name in EU_COUNTRIES


# ---------------------------------------------------------------------------
# build_catalog validation
# ---------------------------------------------------------------------------


def _entry(**overrides):
    entry = {
        "id": "sample",
        "label": "Sample",
        "weight": 3,
        "rules": (re.compile("sample"),),
        "description": "sample entry",
    }
    entry.update(overrides)
    return entry


class TestBuildCatalog:
    def test_valid_entries(self):
        catalog = build_catalog([_entry(), _entry(id="other")], SignalCategory.EU_POSITIVE)
        assert [p.id for p in catalog] == ["sample", "other"]
        assert catalog[0].category == SignalCategory.EU_POSITIVE

    def test_duplicate_id_rejected(self):
        with pytest.raises(CatalogError, match="duplicate"):
            build_catalog([_entry(), _entry()], SignalCategory.EU_POSITIVE)

    def test_empty_rules_rejected(self):
        with pytest.raises(CatalogError):
            build_catalog([_entry(rules=())], SignalCategory.RED_FLAG)

    def test_missing_label_rejected(self):
        entry = _entry()
        del entry["label"]
        with pytest.raises(CatalogError):
            build_catalog([entry], SignalCategory.RED_FLAG)

    def test_empty_id_rejected(self):
        with pytest.raises(CatalogError):
            build_catalog([_entry(id="")], SignalCategory.RED_FLAG)


# ---------------------------------------------------------------------------
# Individual signals
# ---------------------------------------------------------------------------


class TestEuPositiveSignals:
    @pytest.mark.parametrize(
        "text",
        [
            "These terms are governed by the laws of Germany.",
            "This agreement is subject to the law of the Netherlands.",
            "Exclusive jurisdiction of the courts of Ireland.",
            "Governing law: France",
        ],
    )
    def test_eu_jurisdiction(self, text):
        assert _matches("eu_jurisdiction", text) >= 1

    def test_eu_registered(self):
        assert _matches("eu_registered", "Example GmbH is registered in Austria.") == 1
        assert _matches("eu_registered", "A company based in Sweden") == 1

    def test_eu_headquarters(self):
        assert _matches("eu_headquarters", "We are headquartered in Czech Republic.") == 1
        assert _matches("eu_headquarters", "Registered office: Hauptstrasse 1, 10115 Berlin, Germany") == 1

    def test_eu_vat_labelled(self):
        assert _matches("eu_vat", "VAT: DE123456789") >= 1
        assert _matches("eu_vat", "USt-IdNr.: DE 123456789") >= 1

    def test_eu_vat_requires_digits(self):
        assert _matches("eu_vat", "DEVELOPMENTS AND FRAMEWORKS") == 0

    @pytest.mark.parametrize(
        "text",
        ["Handelsregister: HRB 12345", "RCS Paris 123 456 789", "KvK 12345678", "Registro Mercantil de Madrid"],
    )
    def test_eu_company_reg(self, text):
        assert _matches("eu_company_reg", text) >= 1

    def test_eu_country_address(self):
        assert _matches("eu_country_address", "Musterweg 5, 1010 Wien, Austria") >= 1

    def test_eu_country_mention_counts_occurrences(self):
        assert _matches("eu_country_mention", "Spain, Portugal and Italy") == 3

    def test_native_country_spelling(self):
        assert _matches("eu_country_mention", "Sitz in Österreich") == 1

    def test_impressum(self):
        assert _matches("impressum", "Impressum — Angaben gemäß § 5 TMG") == 2

    def test_gdpr_mention_is_case_sensitive_for_acronym(self):
        assert _matches("gdpr_mention", "We comply with the GDPR.") == 1
        assert _matches("gdpr_mention", "gdpr") == 0
        assert _matches("gdpr_mention", "general data protection regulation") == 1

    def test_eu_data_authority(self):
        assert _matches("eu_data_authority", "contact our Data Protection Officer or the CNIL") == 2

    def test_gdpr_data_rights(self):
        assert _matches("gdpr_data_rights", "You have the right to erasure and to data portability.") == 2

    def test_gdpr_legal_basis(self):
        assert _matches("gdpr_legal_basis", "processing based on Art. 6 (1) lit. f GDPR") == 1

    def test_eu_transfer_safeguards(self):
        assert _matches("eu_transfer_safeguards", "we rely on Standard Contractual Clauses") == 1

    def test_eprivacy(self):
        assert _matches("eprivacy", "as required by the ePrivacy Directive") == 1


class TestRedFlags:
    def test_us_jurisdiction(self):
        assert _matches("us_jurisdiction", "governed by the laws of the State of California") == 1

    def test_us_registered(self):
        assert _matches("us_registered", "Acme, a Delaware corporation") == 1
        assert _matches("us_registered", "incorporated in the State of Delaware") == 1

    def test_non_eu_hq(self):
        assert _matches("non_eu_hq", "We are headquartered in the United States.") == 1
        assert _matches("non_eu_hq", "based in the U.S.") == 1

    def test_non_eu_hq_does_not_fire_on_eu(self):
        assert _matches("non_eu_hq", "based in Germany") == 0

    def test_binding_arbitration(self):
        assert _matches("binding_arbitration", "disputes are resolved by binding arbitration") == 1

    def test_data_selling(self):
        assert _matches("data_selling", "We may sell your personal information to partners.") == 1
        assert _matches("data_selling", "Do Not Sell My Personal Information") == 1

    @pytest.mark.parametrize(
        "text",
        ["We do not sell your personal data.", "We never sell your data.", "We don't sell your information."],
    )
    def test_data_selling_negated(self, text):
        assert _matches("data_selling", text) == 0
