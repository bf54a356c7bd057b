# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Site prober — best-effort fetch of well-known legal/company paths.

Every path in ``KNOWN_PATHS`` is fetched independently with its own timeout.
A probe is usable only if the response is 2xx, ``text/html`` and at least
``MIN_BODY_LENGTH`` characters long.  Failures are per path
(``ProbeError``) and never abort the others; ``probe_all`` itself never
fails, it just returns fewer texts.

Cancelling ``probe_all`` cancels every in-flight probe (TaskGroup) and
returns nothing.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from urllib.parse import urljoin

import httpx

from .errors import ProbeError, ProbeFailure
from .normalize import strip_html

try:
    _EUSHIELD_VERSION = _pkg_version("eushield")
except PackageNotFoundError:
    _EUSHIELD_VERSION = "unknown"

logger = logging.getLogger(__name__)

USER_AGENT = f"EUShield/{_EUSHIELD_VERSION}"
PROBE_TIMEOUT = 3.0  # seconds, per path
MIN_BODY_LENGTH = 100  # shorter bodies cannot hold meaningful legal text
DEFAULT_CONCURRENCY = 6

KNOWN_PATHS: tuple[str, ...] = (
    # Company info (registration, address, jurisdiction)
    "/about",
    "/about-us",
    "/company",
    "/contact",
    "/impressum",
    "/ueber-uns",
    # Legal pages
    "/terms",
    "/tos",
    "/privacy",
    "/privacy-policy",
    "/legal",
    "/legal-notice",
    "/cookie-policy",
    "/agb",
    "/datenschutz",
    "/cgv",
    "/aviso-legal",
    "/informativa-privacy",
    # Localized
    "/en/about",
    "/en/terms",
    "/en/privacy",
    "/en/legal",
    "/de/impressum",
    "/de/datenschutz",
    "/de/ueber-uns",
    "/fr/mentions-legales",
    "/fr/politique-de-confidentialite",
    "/es/aviso-legal",
    "/es/politica-de-privacidad",
    "/it/informativa-privacy",
)


class SiteProber:
    """Fetch ``KNOWN_PATHS`` on a site origin and return their extracted text.

    Pass an ``httpx.AsyncClient`` to share a connection pool (or a
    ``MockTransport`` in tests).  Without one, a client is created per
    ``probe_all`` call, or once for the lifetime of ``async with``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = PROBE_TIMEOUT,
        max_concurrency: int = DEFAULT_CONCURRENCY,
        paths: Sequence[str] = KNOWN_PATHS,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._client = client
        self._owns_client = False
        self._timeout = timeout
        self._max_concurrency = max_concurrency
        self._paths = tuple(paths)

    @property
    def paths(self) -> tuple[str, ...]:
        return self._paths

    async def __aenter__(self) -> SiteProber:
        if self._client is None:
            self._client = self._new_client()
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the client if this prober created it. Idempotent."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(self._timeout),
            headers={"User-Agent": USER_AGENT},
        )

    # -- Single path --

    async def probe_path(self, origin: str, path: str) -> str:
        """Fetch one path and return its normalized text.

        Raises:
            ProbeError: with reason fetch_failed, not_html, too_short or timeout.
        """
        if self._client is not None:
            return await self._fetch(self._client, origin, path)
        async with self._new_client() as client:
            return await self._fetch(client, origin, path)

    async def _fetch(self, client: httpx.AsyncClient, origin: str, path: str) -> str:
        url = urljoin(origin, path)
        try:
            response = await asyncio.wait_for(
                client.get(url, headers={"Accept": "text/html"}, timeout=self._timeout),
                timeout=self._timeout,
            )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise ProbeError(path, ProbeFailure.TIMEOUT) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeError(path, ProbeFailure.FETCH_FAILED) from e

        if not response.is_success:
            raise ProbeError(path, ProbeFailure.FETCH_FAILED)

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type.lower():
            raise ProbeError(path, ProbeFailure.NOT_HTML)

        html = response.text
        if len(html) < MIN_BODY_LENGTH:
            raise ProbeError(path, ProbeFailure.TOO_SHORT)

        return strip_html(html)

    # -- All paths --

    async def probe_all(self, origin: str) -> list[str]:
        """Probe every known path; return usable texts in path-list order."""
        if self._client is not None:
            return await self._probe_all(self._client, origin)
        async with self._new_client() as client:
            return await self._probe_all(client, origin)

    async def _probe_all(self, client: httpx.AsyncClient, origin: str) -> list[str]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _guarded(path: str) -> str | None:
            async with semaphore:
                try:
                    return await self._fetch(client, origin, path)
                except ProbeError as e:
                    logger.debug("Probe miss: %s%s (%s)", origin, e.path, e.reason.value)
                    return None

        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(_guarded(path)) for path in self._paths]

        texts = [text for task in tasks if (text := task.result())]
        logger.info("Probed %s: %d/%d paths usable", origin, len(texts), len(tasks))
        return texts
