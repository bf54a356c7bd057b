# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Weighted signal scorer: text (+ optional domain) -> status and confidence.

Pure and deterministic.  Every catalog entry is evaluated; matched weights
are summed, an EU/EEA ccTLD adds a flat bonus, and the total is banded:

    score >= 15  -> green
    score <= -5  -> red
    otherwise    -> grey   (wide band: not enough evidence either way)

Confidence is breadth, not strength: the share of positive evidence
categories observed, out of every positive catalog entry plus the TLD.
"""

from __future__ import annotations

from .patterns import EU_POSITIVE_PATTERNS, PATTERNS
from .schemas import ComplianceStatus, MatchedSignal, ScoringResult, SignalCategory

GREEN_THRESHOLD = 15
RED_THRESHOLD = -5
TLD_BONUS = 5

EU_TLDS: frozenset[str] = frozenset(
    {
        "eu",
        "at", "be", "bg", "hr", "cy", "cz", "dk", "ee", "fi",
        "fr", "de", "gr", "hu", "ie", "it", "lv", "lt", "lu",
        "mt", "nl", "pl", "pt", "ro", "sk", "si", "es", "se",
        # EEA
        "no", "is", "li",
    }
)  # fmt: skip

# Denominator for confidence: tied to the catalog, +1 for the synthetic TLD signal.
TOTAL_POSSIBLE_SIGNALS = len(EU_POSITIVE_PATTERNS) + 1


def eu_tld(domain: str | None) -> str | None:
    """Return the domain's TLD if it is an EU/EEA ccTLD, else None."""
    if not domain:
        return None
    tld = domain.rstrip(".").rsplit(".", 1)[-1].lower()
    return tld if tld in EU_TLDS else None


def _tld_signal(tld: str) -> MatchedSignal:
    return MatchedSignal(
        id="eu_tld",
        label="EU Domain TLD",
        category=SignalCategory.EU_POSITIVE,
        weight=TLD_BONUS,
        description=f"Domain uses .{tld} (EU/EEA country TLD)",
        match_count=1,
    )


def _percent(part: int, whole: int) -> int:
    # Half-up rounding; round() would give 12 for 12.5.
    return (200 * part + whole) // (2 * whole)


def status_for(score: int) -> ComplianceStatus:
    if score >= GREEN_THRESHOLD:
        return ComplianceStatus.GREEN
    if score <= RED_THRESHOLD:
        return ComplianceStatus.RED
    return ComplianceStatus.GREY


def score_text(text: str, domain: str | None = None) -> ScoringResult:
    """Score *text* against the signal catalog.

    Args:
        text: Combined page text (already normalized).
        domain: Hostname of the analyzed site; its TLD may add a bonus.

    Returns:
        A validated ``ScoringResult``.  Empty text always yields score 0,
        grey, no signals: without text there is no determination.
    """
    if not text:
        return ScoringResult(
            score=0,
            status=ComplianceStatus.GREY,
            confidence=0,
            signals=(),
            total_possible_signals=TOTAL_POSSIBLE_SIGNALS,
        )

    signals: list[MatchedSignal] = []
    for pattern in PATTERNS:
        count = pattern.count_matches(text)
        if count > 0:
            signals.append(MatchedSignal.from_pattern(pattern, count))

    score = sum(s.weight for s in signals)

    tld = eu_tld(domain)
    if tld is not None:
        score += TLD_BONUS
        signals.append(_tld_signal(tld))

    positive_found = sum(1 for s in signals if s.category == SignalCategory.EU_POSITIVE)

    return ScoringResult(
        score=score,
        status=status_for(score),
        confidence=_percent(positive_found, TOTAL_POSSIBLE_SIGNALS),
        signals=tuple(signals),
        total_possible_signals=TOTAL_POSSIBLE_SIGNALS,
    )
