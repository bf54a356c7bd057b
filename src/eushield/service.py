# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shield service — cache-first analysis and message dispatch.

Sits between the transport (messages) and the detection pipeline:

- ``analyze()``: cached result if fresh, otherwise run the pipeline once per
  domain (concurrent callers join the in-flight task), store, notify.
- ``handle()``: validate an inbound message and dispatch it.

Nothing raised by the pipeline or the cache reaches the caller: failures
resolve to ``GREY_RESULT`` (no determination) and are logged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from .cache import ResultCacheProtocol
from .detector import run_detection_pipeline, site_origin
from .document import PageDocument
from .errors import CacheError, DetectionError
from .logging_config import bound_domain
from .messages import (
    CheckPageMessage,
    ForceRescanMessage,
    GetResultMessage,
    ScanResultMessage,
    dump_message,
    parse_message,
)
from .prober import SiteProber
from .schemas import GREY_RESULT, CachedResult, ComplianceStatus, ScoringResult
from .scorer import TOTAL_POSSIBLE_SIGNALS

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str, ComplianceStatus], None]


class ShieldService:
    """Owns the cache, the prober and the per-domain in-flight tasks."""

    def __init__(
        self,
        cache: ResultCacheProtocol,
        *,
        prober: SiteProber | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        self._cache = cache
        self._prober = prober
        self._on_status = on_status
        self._in_flight: dict[str, asyncio.Task[ScoringResult]] = {}

    @property
    def in_flight(self) -> frozenset[str]:
        """Domains with an analysis currently running."""
        return frozenset(self._in_flight)

    # -- Analysis --

    async def analyze(
        self,
        url: str,
        document: PageDocument | None = None,
        *,
        use_cache: bool = True,
    ) -> ScoringResult:
        """Score the site behind *url*; never raises for pipeline or cache failures."""
        try:
            _, domain = site_origin(url)
        except ValueError:
            logger.warning("Cannot analyze URL without host: %r", url)
            return GREY_RESULT

        with bound_domain(domain):
            if use_cache:
                cached = await self._get_cached(domain)
                if cached is not None:
                    logger.debug("Cache hit: %s", domain)
                    self._notify(domain, cached.status)
                    return cached.to_scoring_result(TOTAL_POSSIBLE_SIGNALS)

            task = self._in_flight.get(domain)
            if task is None:
                task = asyncio.create_task(self._run(url, domain, document), name=f"eushield:{domain}")
                self._in_flight[domain] = task
                task.add_done_callback(lambda t, d=domain: self._forget(d, t))
            else:
                logger.debug("Joining in-flight analysis: %s", domain)
            # A cancelled caller must not cancel the run other callers share.
            return await asyncio.shield(task)

    def _forget(self, domain: str, task: asyncio.Task[ScoringResult]) -> None:
        if self._in_flight.get(domain) is task:
            del self._in_flight[domain]

    async def _run(self, url: str, domain: str, document: PageDocument | None) -> ScoringResult:
        try:
            outcome = await run_detection_pipeline(url, document=document, prober=self._prober)
        except DetectionError as e:
            logger.info("No analyzable pages for %s (%s)", domain, e.reason.value)
            self._notify(domain, GREY_RESULT.status)
            return GREY_RESULT
        except Exception:
            logger.exception("Detection pipeline failed for %s", domain)
            self._notify(domain, GREY_RESULT.status)
            return GREY_RESULT

        await self._store(domain, outcome.scoring, outcome.detection.url)
        self._notify(domain, outcome.scoring.status)
        return outcome.scoring

    # -- Cache access (non-fatal) --

    async def _get_cached(self, domain: str) -> CachedResult | None:
        try:
            return await self._cache.get(domain)
        except CacheError as e:
            logger.warning("Cache read failed for %s (%s), treating as miss", domain, e.reason.value)
            return None

    async def _store(self, domain: str, result: ScoringResult, analyzed_url: str) -> None:
        try:
            await self._cache.put(domain, result, analyzed_url)
        except CacheError as e:
            logger.warning("Cache write failed for %s (%s)", domain, e.reason.value)

    async def _clear(self, domain: str) -> None:
        try:
            await self._cache.clear(domain)
        except CacheError as e:
            logger.warning("Cache clear failed for %s (%s)", domain, e.reason.value)

    def _notify(self, domain: str, status: ComplianceStatus) -> None:
        if self._on_status is not None:
            self._on_status(domain, status)

    # -- Message dispatch --

    async def handle(self, raw: Any, *, document: PageDocument | None = None) -> dict[str, Any] | None:
        """Dispatch one inbound message.

        Returns the reply payload (``SCAN_RESULT`` for analyze requests, the
        cached entry for ``GET_RESULT``) or None when there is nothing to send
        back, including when *raw* is not a valid message.
        """
        message = parse_message(raw)
        if message is None:
            return None

        if isinstance(message, CheckPageMessage):
            url = message.url or f"https://{message.domain}/"
            result = await self.analyze(url, document)
            return self._scan_result(message.domain, result, url)

        if isinstance(message, ScanResultMessage):
            logger.info(
                "SCAN_RESULT for %s: score=%d status=%s signals=%d",
                message.domain,
                message.result.score,
                message.result.status.value,
                len(message.result.signals),
            )
            await self._store(message.domain, message.result, message.url)
            self._notify(message.domain, message.result.status)
            return None

        if isinstance(message, GetResultMessage):
            cached = await self._get_cached(message.domain)
            return cached.to_payload() if cached is not None else None

        if isinstance(message, ForceRescanMessage):
            await self._clear(message.domain)
            url = message.url or f"https://{message.domain}/"
            result = await self.analyze(url, document, use_cache=False)
            return self._scan_result(message.domain, result, url)

        return None

    @staticmethod
    def _scan_result(domain: str, result: ScoringResult, url: str) -> dict[str, Any]:
        return dump_message(ScanResultMessage(domain=domain, result=result, url=url))
