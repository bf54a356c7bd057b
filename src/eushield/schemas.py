# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Pydantic value objects shared by the detection and scoring pipeline.

Every model is frozen: results are recomputed from inputs, never mutated.
Wire names are camelCase (``matchCount``, ``totalPossibleSignals``,
``analyzedUrl``) so payloads stay compatible with the extension's storage;
Python code uses the snake_case field names.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SignalCategory(StrEnum):
    EU_POSITIVE = "eu_positive"
    RED_FLAG = "red_flag"


class ComplianceStatus(StrEnum):
    GREEN = "green"
    RED = "red"
    GREY = "grey"


class PageType(StrEnum):
    TOS = "tos"
    PRIVACY = "privacy"
    COOKIE = "cookie"
    LEGAL = "legal"


class ShieldModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    def to_payload(self) -> dict:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class SignalPattern(ShieldModel):
    """One weighted catalog entry.  Matches if any of ``rules`` matches."""

    id: str = Field(min_length=1)
    category: SignalCategory
    label: str = Field(min_length=1)
    weight: int  # sign follows category by convention only
    rules: tuple[re.Pattern[str], ...] = Field(min_length=1)
    description: str

    def count_matches(self, text: str) -> int:
        """Non-overlapping occurrences summed across every rule."""
        return sum(sum(1 for _ in rule.finditer(text)) for rule in self.rules)


class MatchedSignal(ShieldModel):
    """A catalog entry (or synthetic signal) that fired at least once."""

    id: str
    label: str
    category: SignalCategory
    weight: int
    description: str
    match_count: int = Field(ge=1)

    @classmethod
    def from_pattern(cls, pattern: SignalPattern, match_count: int) -> MatchedSignal:
        return cls(
            id=pattern.id,
            label=pattern.label,
            category=pattern.category,
            weight=pattern.weight,
            description=pattern.description,
            match_count=match_count,
        )


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class DetectionResult(ShieldModel):
    detected: bool
    type: PageType | None = None
    url: str
    text: str = ""


class ScoringResult(ShieldModel):
    score: int
    status: ComplianceStatus
    confidence: int = Field(ge=0, le=100)
    signals: tuple[MatchedSignal, ...] = ()
    total_possible_signals: int = Field(ge=0)


class DetectionOutcome(ShieldModel):
    """Pipeline success: what was analyzed, and how it scored."""

    detection: DetectionResult
    scoring: ScoringResult


class CachedResult(ShieldModel):
    """Scoring result as persisted by the cache, keyed by domain."""

    domain: str = Field(min_length=1)
    score: int
    status: ComplianceStatus
    confidence: int = Field(ge=0, le=100)
    signals: tuple[MatchedSignal, ...] = ()
    analyzed_url: str
    timestamp: float  # epoch seconds at write time

    def to_scoring_result(self, total_possible_signals: int) -> ScoringResult:
        return ScoringResult(
            score=self.score,
            status=self.status,
            confidence=self.confidence,
            signals=self.signals,
            total_possible_signals=total_possible_signals,
        )


# Presented whenever the pipeline cannot produce a determination.
GREY_RESULT = ScoringResult(
    score=0,
    status=ComplianceStatus.GREY,
    confidence=0,
    signals=(),
    total_possible_signals=0,
)
