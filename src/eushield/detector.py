# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Detection pipeline: classify current page -> probe site -> merge -> score.

Single pass, no retries (per-path timeouts live in the prober).  Terminal
states: a ``DetectionOutcome``, or ``DetectionError(no_pages_found)`` when
neither the current page nor any probed path yielded text.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from .classifier import detect_current_page
from .document import PageDocument
from .errors import DetectionError, DetectionFailure
from .prober import SiteProber
from .schemas import DetectionOutcome, DetectionResult
from .scorer import score_text

logger = logging.getLogger(__name__)

MAX_COMBINED_LENGTH = 100_000


def site_origin(url: str) -> tuple[str, str]:
    """Return ``(scheme://host[:port], hostname)`` for *url*.

    Raises:
        ValueError: if the URL has no hostname.
    """
    p = urlparse(url)
    host = p.hostname or ""
    if not host:
        raise ValueError(f"URL has no host: {url!r}")
    scheme = p.scheme or "https"
    port = p.port
    # Omit default ports
    if port and not ((scheme == "http" and port == 80) or (scheme == "https" and port == 443)):
        return f"{scheme}://{host}:{port}", host
    return f"{scheme}://{host}", host


def combine_texts(current: str | None, probed: list[str]) -> str:
    """Current page first, then probes in path-list order; bounded length."""
    parts = [current] if current else []
    parts.extend(probed)
    return " ".join(parts)[:MAX_COMBINED_LENGTH]


async def run_detection_pipeline(
    url: str,
    *,
    document: PageDocument | None = None,
    prober: SiteProber | None = None,
) -> DetectionOutcome:
    """Analyze the site behind *url*.

    Args:
        url: The page the user is on.
        document: The rendered page, when running in a page context.
        prober: Shared prober; a short-lived one is used when omitted.

    Raises:
        DetectionError: ``no_pages_found`` when there is no text to score.
        ValueError: if *url* has no host.
    """
    origin, hostname = site_origin(url)

    current = detect_current_page(url, document)
    if current is None:
        logger.debug("Current page not recognised as legal/company page: %s", url)
    else:
        logger.debug("Current page is %s: %s", current.type, url)

    probed = await (prober or SiteProber()).probe_all(origin)

    if current is None and not probed:
        raise DetectionError(DetectionFailure.NO_PAGES_FOUND)

    combined = combine_texts(current.text if current else None, probed)
    scoring = score_text(combined, hostname)

    base = current or DetectionResult(detected=True, type=None, url=url)
    detection = base.model_copy(update={"text": combined})

    logger.info(
        "Scored %s: score=%d status=%s confidence=%d signals=%d",
        hostname,
        scoring.score,
        scoring.status.value,
        scoring.confidence,
        len(scoring.signals),
    )
    return DetectionOutcome(detection=detection, scoring=scoring)
