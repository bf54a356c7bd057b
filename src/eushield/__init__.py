# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""EU Shield: heuristic EU/EEA operator detection from legal pages.

Pipeline:
- classifier: is the current page a legal/company page, and of which type
- prober: fetch a fixed list of well-known legal paths on the site
- scorer: weighted pattern matching over the merged text -> status + confidence
"""

from __future__ import annotations

from .schemas import (
    CachedResult,
    ComplianceStatus,
    DetectionOutcome,
    DetectionResult,
    MatchedSignal,
    PageType,
    ScoringResult,
    SignalCategory,
    SignalPattern,
)

__all__ = [
    "CachedResult",
    "ComplianceStatus",
    "DetectionOutcome",
    "DetectionResult",
    "MatchedSignal",
    "PageType",
    "ScoringResult",
    "SignalCategory",
    "SignalPattern",
]
