# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Per-domain result cache with a 7-day TTL.

Entries are stored as JSON (``CachedResult``, camelCase keys) under
``eushield_<domain>``.  Reads re-validate the payload: a corrupt entry is
purged and reported as a miss, as is an expired one.

Backends:
- ``InMemoryResultCache``: dict-backed, for tests and one-shot CLI runs
- ``SqliteResultCache``: aiosqlite-backed, persistent across runs

Backend I/O failures surface as ``CacheError``; callers treat them as
non-fatal (miss on read, skipped write).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from contextlib import suppress
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiosqlite
from pydantic import ValidationError

from .errors import CacheError, CacheFailure
from .schemas import CachedResult, ScoringResult

logger = logging.getLogger(__name__)

CACHE_TTL = 7 * 24 * 60 * 60.0  # seconds
_KEY_PREFIX = "eushield_"
_SCHEMA_VERSION = 1


def cache_key(domain: str) -> str:
    return f"{_KEY_PREFIX}{domain.strip().lower()}"


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ResultCacheProtocol(Protocol):
    """Interface the service depends on."""

    async def get(self, domain: str) -> CachedResult | None: ...

    async def put(self, domain: str, result: ScoringResult, analyzed_url: str) -> CachedResult: ...

    async def clear(self, domain: str) -> None: ...


# ---------------------------------------------------------------------------
# Shared TTL + validation logic
# ---------------------------------------------------------------------------


class _ResultCache:
    """Validation and expiry over a raw ``key -> JSON string`` store."""

    def __init__(self, *, ttl: float = CACHE_TTL, clock: Callable[[], float] = time.time) -> None:
        self._ttl = ttl
        self._clock = clock

    async def _read_raw(self, key: str) -> str | None:
        raise NotImplementedError

    async def _write_raw(self, key: str, payload: str, written_at: float) -> None:
        raise NotImplementedError

    async def _delete_raw(self, key: str) -> None:
        raise NotImplementedError

    async def get(self, domain: str) -> CachedResult | None:
        """Fresh, valid entry for *domain*, or None."""
        key = cache_key(domain)
        raw = await self._read_raw(key)
        if raw is None:
            return None

        try:
            cached = CachedResult.model_validate_json(raw)
        except ValidationError:
            logger.warning("Corrupt cache entry for %s, purging", domain)
            await self._delete_raw(key)
            return None

        if self._clock() - cached.timestamp > self._ttl:
            logger.debug("Cache TTL expired: %s", domain)
            await self._delete_raw(key)
            return None

        return cached

    async def put(self, domain: str, result: ScoringResult, analyzed_url: str) -> CachedResult:
        """Store *result* for *domain*, stamped with the current time."""
        now = self._clock()
        try:
            cached = CachedResult(
                domain=domain,
                score=result.score,
                status=result.status,
                confidence=result.confidence,
                signals=result.signals,
                analyzed_url=analyzed_url,
                timestamp=now,
            )
        except ValidationError as e:
            raise CacheError(CacheFailure.VALIDATION_FAILED, domain) from e

        await self._write_raw(cache_key(domain), cached.model_dump_json(by_alias=True), now)
        logger.debug("Cache store: %s status=%s", domain, result.status.value)
        return cached

    async def clear(self, domain: str) -> None:
        await self._delete_raw(cache_key(domain))
        logger.debug("Cache cleared: %s", domain)


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


class InMemoryResultCache(_ResultCache):
    """Dict-backed cache.  Not persistent, not shared across processes."""

    def __init__(self, *, ttl: float = CACHE_TTL, clock: Callable[[], float] = time.time) -> None:
        super().__init__(ttl=ttl, clock=clock)
        self._entries: dict[str, str] = {}

    async def _read_raw(self, key: str) -> str | None:
        return self._entries.get(key)

    async def _write_raw(self, key: str, payload: str, written_at: float) -> None:
        self._entries[key] = payload

    async def _delete_raw(self, key: str) -> None:
        self._entries.pop(key, None)

    @property
    def size(self) -> int:
        return len(self._entries)


# ---------------------------------------------------------------------------
# SQLite backend
# ---------------------------------------------------------------------------

_CREATE_RESULTS = """
CREATE TABLE IF NOT EXISTS results (
    key        TEXT PRIMARY KEY,
    payload    TEXT NOT NULL,
    written_at REAL NOT NULL
)
"""


class SqliteResultCache(_ResultCache):
    """SQLite-backed cache on a single long-lived aiosqlite connection.

    Use the ``create()`` async classmethod factory — never instantiate directly.
    """

    def __init__(
        self,
        db: aiosqlite.Connection,
        *,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl=ttl, clock=clock)
        self._db = db

    @classmethod
    async def create(
        cls,
        db_path: str | Path,
        *,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ) -> SqliteResultCache:
        """Open (or create) the cache database and initialise the schema.

        Resolves ``~`` and creates parent directories automatically.

        Raises:
            ValueError: If the existing database has a newer schema version.
        """
        if str(db_path) == ":memory:":
            target = ":memory:"
        else:
            path = Path(db_path).expanduser().resolve()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)

        db = await aiosqlite.connect(target)
        try:
            await db.execute("PRAGMA journal_mode = WAL")

            cursor = await db.execute("PRAGMA user_version")
            row = await cursor.fetchone()
            current_version = row[0] if row else 0

            if current_version > _SCHEMA_VERSION:
                raise ValueError(
                    f"Cache schema version {current_version} is newer than supported version {_SCHEMA_VERSION}"
                )

            if current_version < _SCHEMA_VERSION:
                await db.execute(_CREATE_RESULTS)
                await db.execute(f"PRAGMA user_version = {_SCHEMA_VERSION}")
                await db.commit()
        except BaseException:
            await db.close()
            raise

        return cls(db, ttl=ttl, clock=clock)

    async def _read_raw(self, key: str) -> str | None:
        try:
            cursor = await self._db.execute("SELECT payload FROM results WHERE key = ?", (key,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise CacheError(CacheFailure.READ_FAILED, key.removeprefix(_KEY_PREFIX)) from e
        return row[0] if row else None

    async def _write_raw(self, key: str, payload: str, written_at: float) -> None:
        try:
            await self._db.execute(
                "INSERT OR REPLACE INTO results (key, payload, written_at) VALUES (?, ?, ?)",
                (key, payload, written_at),
            )
            await self._db.commit()
        except aiosqlite.Error as e:
            raise CacheError(CacheFailure.WRITE_FAILED, key.removeprefix(_KEY_PREFIX)) from e

    async def _delete_raw(self, key: str) -> None:
        try:
            await self._db.execute("DELETE FROM results WHERE key = ?", (key,))
            await self._db.commit()
        except aiosqlite.Error as e:
            raise CacheError(CacheFailure.WRITE_FAILED, key.removeprefix(_KEY_PREFIX)) from e

    async def purge_expired(self) -> int:
        """Delete every entry older than the TTL. Returns the number removed."""
        cutoff = self._clock() - self._ttl
        try:
            cursor = await self._db.execute("DELETE FROM results WHERE written_at < ?", (cutoff,))
            await self._db.commit()
        except aiosqlite.Error as e:
            raise CacheError(CacheFailure.WRITE_FAILED, "*") from e
        return cursor.rowcount

    async def close(self) -> None:
        """Close the database connection. Idempotent."""
        with suppress(Exception):
            await self._db.close()
