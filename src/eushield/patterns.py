# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Signal catalog — weighted textual evidence for EU/EEA vs non-EU operators.

20 entries: 15 ``eu_positive``, 5 ``red_flag``.  Catalog order is the order
matched signals are reported in.  Several rules are built by interpolating
``EU_COUNTRIES`` into template patterns; the result is validated like any
hand-written entry.

The catalog is built and validated once at import.  A malformed entry raises
``CatalogError`` and the package fails to import.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from .errors import CatalogError
from .schemas import SignalCategory, SignalPattern

# ---------------------------------------------------------------------------
# Country names
# ---------------------------------------------------------------------------

# 27 EU member states + EEA (Norway, Iceland, Liechtenstein), English names,
# common aliases and the native spellings seen in legal notices.
EU_COUNTRIES: tuple[str, ...] = (
    "Austria", "Belgium", "Bulgaria", "Croatia", "Cyprus",
    "Czech Republic", "Czechia", "Denmark", "Estonia", "Finland",
    "France", "Germany", "Greece", "Hungary", "Ireland",
    "Italy", "Latvia", "Lithuania", "Luxembourg", "Malta",
    "Netherlands", "Holland", "Poland", "Portugal", "Romania",
    "Slovakia", "Slovenia", "Spain", "Sweden",
    # EEA
    "Norway", "Iceland", "Liechtenstein",
    # Native spellings
    "Deutschland", "Österreich", "Belgique", "België", "България",
    "Hrvatska", "Κύπρος", "Česká republika", "Danmark", "Eesti",
    "Suomi", "Ελλάδα", "Magyarország", "Éire", "Italia",
    "Latvija", "Lietuva", "Luxemburg", "Lëtzebuerg", "Nederland",
    "Polska", "România", "Slovensko", "Slovenija", "España",
    "Sverige", "Norge", "Ísland",
)  # fmt: skip

# Longest first so multi-word names win over their prefixes.
EU_COUNTRY_GROUP = "|".join(re.escape(c) for c in sorted(EU_COUNTRIES, key=len, reverse=True))

_US_STATES = (
    "California|Delaware|New York|Texas|Florida|Nevada|Washington|Oregon|Virginia|Georgia|Illinois|"
    "Massachusetts|Colorado|Arizona|North Carolina|Pennsylvania|Ohio|Michigan|New Jersey|Maryland|Utah|"
    "Connecticut|Wyoming"
)
_US_INCORPORATION_STATES = "Delaware|California|Nevada|Wyoming|New York|Texas|Florida|Washington"


def _rx(pattern: str, flags: int = re.IGNORECASE) -> re.Pattern[str]:
    return re.compile(pattern, flags)


# ---------------------------------------------------------------------------
# EU positive signals
# ---------------------------------------------------------------------------

_EU_POSITIVE: list[dict[str, Any]] = [
    {
        "id": "eu_jurisdiction",
        "label": "EU Jurisdiction",
        "weight": 15,
        "rules": (
            _rx(
                r"\b(?:governed by|subject to|under)\s+(?:the\s+)?laws?\s+(?:of\s+)?(?:the\s+)?"
                rf"(?:country\s+of\s+)?(?:{EU_COUNTRY_GROUP})\b"
            ),
            _rx(rf"\bjurisdiction\s+(?:of\s+)?(?:the\s+)?(?:courts?\s+(?:of|in)\s+)?(?:{EU_COUNTRY_GROUP})\b"),
            _rx(rf"\b(?:applicable|governing)\s+law[:\s]+(?:{EU_COUNTRY_GROUP})\b"),
        ),
        "description": "Legal jurisdiction in an EU/EEA country",
    },
    {
        "id": "eu_registered",
        "label": "EU Registration",
        "weight": 15,
        "rules": (
            _rx(
                r"\b(?:registered|incorporated|established|organized)\s+(?:in|under the laws of)\s+"
                rf"(?:{EU_COUNTRY_GROUP})\b"
            ),
            _rx(
                r"\b(?:company|entity|organization|organisation)\s+(?:registered|based|located)\s+in\s+"
                rf"(?:{EU_COUNTRY_GROUP})\b"
            ),
        ),
        "description": "Company registered in an EU/EEA country",
    },
    {
        "id": "eu_headquarters",
        "label": "EU Headquarters",
        "weight": 12,
        "rules": (
            _rx(rf"\b(?:headquartered|based|located|situated|offices?)\s+in\s+(?:{EU_COUNTRY_GROUP})\b"),
            _rx(
                r"\b(?:head\s*office|principal\s+(?:place|office)|registered\s+(?:office|address))[:\s]+"
                rf".{{0,200}}?(?:{EU_COUNTRY_GROUP})\b"
            ),
        ),
        "description": "Headquarters or office in an EU/EEA country",
    },
    {
        "id": "eu_vat",
        "label": "EU VAT Number",
        "weight": 15,
        "rules": (
            _rx(
                r"\b(?:VAT|USt-?Id(?:Nr)?|TVA|IVA|BTW|NIP|UID|MOMS|ALV|ΑΦΜ|ÁFA)[:\s]?\s*"
                r"(?:(?:Nr|No|number|numéro|numero|nummer)?[.:\s]?\s*)?[A-Z]{2}\s?\d{7,12}\b"
            ),
            # Country prefix + body with a digit early on; case-sensitive.
            _rx(
                r"\b(?:AT|BE|BG|HR|CY|CZ|DK|EE|FI|FR|DE|EL|GR|HU|IE|IT|LV|LT|LU|MT|NL|PL|PT|RO|SK|SI|ES|SE)"
                r"\s?(?=[A-Z0-9]{0,2}\d)[A-Z0-9]{7,12}\b",
                0,
            ),
        ),
        "description": "EU VAT identification number",
    },
    {
        "id": "eu_company_reg",
        "label": "EU Company Registry",
        "weight": 12,
        "rules": (
            # DE
            _rx(r"\bHandelsregister\b"),
            _rx(r"\b(?:HRB|HRA)\s?\d{3,}"),
            _rx(r"\bAmtsgericht\b"),
            # FR
            _rx(r"\bRCS\s+\w+\s+\d{3}"),
            _rx(r"\bSIRET\s*[:\s]?\s*\d{14}\b"),
            _rx(r"\bSIREN\s*[:\s]?\s*\d{9}\b"),
            # ES
            _rx(r"\bRegistro\s+Mercantil\b"),
            _rx(r"\b[CN]IF\s*[:\s]?\s*[A-Z]\d{7,8}"),
            # IT
            _rx(r"\bRegistro\s+delle\s+Imprese\b"),
            _rx(r"\bP\.?\s*IVA\s*[:\s]?\s*\d{11}\b"),
            _rx(r"\bPartita\s+IVA\b"),
            # NL
            _rx(r"\bKvK\s*[:\s]?\s*\d{8}\b"),
            _rx(r"\bKamer\s+van\s+Koophandel\b"),
            # EE
            _rx(r"\b(?:Äriregistri?\s+kood|registry\s+code)\s*[:\s]?\s*\d{7,8}\b"),
            _rx(r"\bcompany\s+(?:registration|reg\.?)\s*(?:number|no\.?|nr\.?|#)?\s*[:\s]?\s*\d{5,}"),
        ),
        "description": "EU company registry or registration number",
    },
    {
        "id": "eu_country_address",
        "label": "EU Country in Address",
        "weight": 8,
        "rules": (
            # postcode + city, country
            _rx(rf"\b\d{{4,5}}\s+\w+[,\s]+(?:{EU_COUNTRY_GROUP})\b"),
            # country closing an address line
            _rx(rf"\b(?:{EU_COUNTRY_GROUP})\s*$", re.IGNORECASE | re.MULTILINE),
        ),
        "description": "EU country mentioned in address context",
    },
    {
        "id": "eu_country_mention",
        "label": "EU Country Mention",
        "weight": 5,
        "rules": (_rx(rf"\b(?:{EU_COUNTRY_GROUP})\b"),),
        "description": "EU/EEA country mentioned in page content",
    },
    {
        "id": "impressum",
        "label": "Impressum",
        "weight": 10,
        "rules": (
            _rx(r"\bImpressum\b"),
            _rx(r"\bAngaben\s+gemäß\s+§\s*5\s+(?:TMG|DDG)\b"),
            _rx(r"\bTelemediengesetz\b"),
            _rx(r"\bMediengesetz\b"),
        ),
        "description": "German/Austrian legal disclosure page (Impressum)",
    },
    {
        "id": "eu_consumer",
        "label": "EU Consumer Rights",
        "weight": 8,
        "rules": (
            _rx(r"\bEuropean Union consumer"),
            _rx(r"\bEU consumer"),
            _rx(r"\bconsumer\s+rights?\s+(?:under|in)\s+(?:the\s+)?EU\b"),
            _rx(r"\bmandatory\s+provisions\s+of\s+the\s+law\b"),
            _rx(r"\bcountry\s+(?:of|in\s+which)\s+(?:you\s+are|your?)\s+residen"),
        ),
        "description": "EU consumer protection language",
    },
    {
        "id": "gdpr_mention",
        "label": "GDPR Mention",
        "weight": 6,
        "rules": (
            _rx(r"\bGDPR\b", 0),
            _rx(r"\bGeneral\s+Data\s+Protection\s+Regulation\b"),
            _rx(r"\bDatenschutz-Grundverordnung\b"),
            _rx(r"\bRGPD\b", 0),
            _rx(r"\bDSGVO\b", 0),
        ),
        "description": "Mentions GDPR (indicates EU regulatory awareness)",
    },
    {
        "id": "eu_data_authority",
        "label": "EU Data Authority",
        "weight": 8,
        "rules": (
            _rx(r"\bData\s+Protection\s+Officer\b"),
            _rx(r"\bDatenschutzbeauftragter?\b"),
            _rx(r"\bsupervisory\s+authority\b"),
            _rx(r"\bAufsichtsbehörde\b"),
            _rx(r"\bData\s+Protection\s+Authority\b"),
            _rx(r"\bData\s+Protection\s+Commission\b"),
            _rx(r"\bCNIL\b", 0),
            _rx(r"\bBfDI\b", 0),
            _rx(r"\bAEPD\b", 0),
            _rx(r"\bGarante\b"),
        ),
        "description": "References EU data protection authority or officer",
    },
    {
        "id": "gdpr_data_rights",
        "label": "GDPR Data Subject Rights",
        "weight": 4,
        "rules": (
            _rx(r"\bright\s+to\s+(?:erasure|be\s+forgotten|rectification|restriction\s+of\s+processing)\b"),
            _rx(r"\bdata\s+portability\b"),
            _rx(r"\bRecht\s+auf\s+(?:Löschung|Berichtigung|Einschränkung|Datenübertragbarkeit)\b"),
            _rx(r"\bdroit\s+(?:à\s+l['’]effacement|de\s+rectification|à\s+la\s+portabilité)"),
        ),
        "description": "Lists GDPR data subject rights (erasure, rectification, portability)",
    },
    {
        "id": "gdpr_legal_basis",
        "label": "GDPR Legal Basis",
        "weight": 4,
        "rules": (
            _rx(r"\blegal\s+bas[ie]s\s+(?:for|of)\s+(?:the\s+)?processing\b"),
            _rx(r"\blegitimate\s+interests?\b"),
            _rx(r"\bArt(?:icle|\.)?\s*6\s*\(\s*1\s*\)"),
            _rx(r"\bRechtsgrundlage\b"),
        ),
        "description": "States a GDPR Article 6 legal basis for processing",
    },
    {
        "id": "eu_transfer_safeguards",
        "label": "EU Transfer Safeguards",
        "weight": 4,
        "rules": (
            _rx(r"\bStandard\s+Contractual\s+Clauses\b"),
            _rx(r"\bStandardvertragsklauseln\b"),
            _rx(r"\badequacy\s+decision\b"),
            _rx(r"\bBinding\s+Corporate\s+Rules\b"),
        ),
        "description": "EU safeguards for international data transfers",
    },
    {
        "id": "eprivacy",
        "label": "ePrivacy Directive",
        "weight": 4,
        "rules": (
            _rx(r"\bePrivacy\s+(?:Directive|Regulation)\b"),
            _rx(r"\bDirective\s+2002/58/EC\b"),
            _rx(r"\b(?:TTDSG|TDDDG)\b", 0),
        ),
        "description": "References the EU ePrivacy rules on cookies and tracking",
    },
]

# ---------------------------------------------------------------------------
# Red flags
# ---------------------------------------------------------------------------

_RED_FLAGS: list[dict[str, Any]] = [
    {
        "id": "us_jurisdiction",
        "label": "US Jurisdiction",
        "weight": -12,
        "rules": (
            _rx(rf"\bgoverned\s+by\s+(?:the\s+)?laws?\s+of\s+(?:the\s+)?(?:State\s+of\s+)?(?:{_US_STATES})\b"),
            _rx(
                r"\bjurisdiction\s+(?:of\s+)?(?:the\s+)?(?:State\s+of\s+)?"
                r"(?:California|Delaware|New York|Texas|Florida|Nevada|Washington)\b"
            ),
            _rx(r"\bgoverned\s+by\s+(?:the\s+)?laws?\s+of\s+(?:the\s+)?United\s+States\b"),
        ),
        "description": "US state/federal jurisdiction",
    },
    {
        "id": "us_registered",
        "label": "US Registration",
        "weight": -12,
        "rules": (
            _rx(
                r"\b(?:registered|incorporated|organized)\s+in\s+(?:the\s+)?(?:State\s+of\s+)?"
                rf"(?:{_US_INCORPORATION_STATES})\b"
            ),
            _rx(r"\bDelaware\s+(?:corporation|LLC|company|entity)\b"),
        ),
        "description": "Company registered in a US state",
    },
    {
        "id": "non_eu_hq",
        "label": "Non-EU Headquarters",
        "weight": -8,
        "rules": (
            _rx(
                r"\b(?:headquartered|based|located)\s+in\s+(?:the\s+)?"
                r"(?:(?:United States|USA|United Kingdom|UK|China|India|Japan|Singapore|Australia|Canada|Brazil"
                r"|Israel)\b|U\.S\.(?:A\.)?)"
            ),
        ),
        "description": "Headquarters in a non-EU country",
    },
    {
        "id": "binding_arbitration",
        "label": "Binding Arbitration",
        "weight": -4,
        "rules": (
            _rx(r"\bbinding\s+arbitration\b"),
            _rx(r"\bmandatory\s+arbitration\b"),
        ),
        "description": "Mandatory binding arbitration (uncommon in EU)",
    },
    {
        "id": "data_selling",
        "label": "Data Selling",
        "weight": -6,
        "rules": (
            _rx(
                r"(?<!not\s)(?<!never\s)(?<!n't\s)"
                r"\b(?:sell|sells|selling)\s+(?:your\s+)?(?:personal\s+)?(?:data|information)\b"
            ),
            _rx(r"\bDo\s+Not\s+Sell\s+(?:or\s+Share\s+)?My\s+Personal\s+Information\b"),
        ),
        "description": "Sells personal data to third parties (US opt-out regime)",
    },
]


# ---------------------------------------------------------------------------
# Build + validate
# ---------------------------------------------------------------------------


def _ensure_unique(patterns: Iterable[SignalPattern]) -> None:
    seen: set[str] = set()
    for pattern in patterns:
        if pattern.id in seen:
            raise CatalogError(f"duplicate catalog id {pattern.id!r}")
        seen.add(pattern.id)


def build_catalog(
    entries: Iterable[Mapping[str, Any]],
    category: SignalCategory,
) -> tuple[SignalPattern, ...]:
    """Validate raw entries of one category into ``SignalPattern`` objects.

    Raises ``CatalogError`` on the first schema violation or duplicate id.
    """
    catalog: list[SignalPattern] = []
    for raw in entries:
        data = {**raw, "category": raw.get("category", category)}
        try:
            catalog.append(SignalPattern.model_validate(data))
        except ValidationError as e:
            raise CatalogError(f"invalid catalog entry {data.get('id')!r}: {e}") from e
    _ensure_unique(catalog)
    return tuple(catalog)


EU_POSITIVE_PATTERNS = build_catalog(_EU_POSITIVE, SignalCategory.EU_POSITIVE)
RED_FLAG_PATTERNS = build_catalog(_RED_FLAGS, SignalCategory.RED_FLAG)

PATTERNS: tuple[SignalPattern, ...] = EU_POSITIVE_PATTERNS + RED_FLAG_PATTERNS
_ensure_unique(PATTERNS)
