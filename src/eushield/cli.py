# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""EU Shield CLI: check, score, clear commands.

Usage:
    eushield check URL [--no-cache] [--format json|text]
    eushield score FILE [--domain DOMAIN] [--html] [--format json|text]
    eushield clear DOMAIN

Environment (CLI flags take precedence):
    EUSHIELD_PROBE_TIMEOUT      per-path probe timeout in seconds (default 3.0)
    EUSHIELD_PROBE_CONCURRENCY  parallel probes per site (default 6)
    EUSHIELD_DB_PATH            cache database (default ~/.eushield/cache.db)
    EUSHIELD_LOG_JSON           1/true/yes for JSON log lines
    EUSHIELD_LOG_LEVEL          root log level (default INFO)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from contextlib import suppress
from pathlib import Path

import aiosqlite
import httpx

from . import logging_config
from .cache import InMemoryResultCache, ResultCacheProtocol, SqliteResultCache
from .document import HtmlDocument
from .errors import CacheError
from .normalize import strip_html
from .prober import DEFAULT_CONCURRENCY, PROBE_TIMEOUT, USER_AGENT, SiteProber
from .schemas import ScoringResult
from .scorer import score_text
from .service import ShieldService

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "~/.eushield/cache.db"
_PAGE_FETCH_TIMEOUT = 10.0
_TRUTHY = ("1", "true", "yes")


def apply_env(args: argparse.Namespace) -> argparse.Namespace:
    """Fill unset options from ``EUSHIELD_*`` environment variables."""
    env_timeout = os.environ.get("EUSHIELD_PROBE_TIMEOUT", "").strip()
    if args.timeout is None and env_timeout:
        with suppress(ValueError):
            args.timeout = float(env_timeout)
    if args.timeout is None:
        args.timeout = PROBE_TIMEOUT

    env_concurrency = os.environ.get("EUSHIELD_PROBE_CONCURRENCY", "").strip()
    if args.concurrency is None and env_concurrency:
        with suppress(ValueError):
            args.concurrency = int(env_concurrency)
    if args.concurrency is None:
        args.concurrency = DEFAULT_CONCURRENCY

    env_db = os.environ.get("EUSHIELD_DB_PATH", "").strip()
    if not args.db_path:
        args.db_path = env_db or DEFAULT_DB_PATH

    env_json = os.environ.get("EUSHIELD_LOG_JSON", "").strip().lower()
    args.json_logs = args.json_logs or env_json in _TRUTHY

    env_level = os.environ.get("EUSHIELD_LOG_LEVEL", "").strip()
    if args.verbose:
        args.log_level = "DEBUG"
    else:
        args.log_level = env_level or "INFO"

    return args


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def format_result(result: ScoringResult, *, domain: str, fmt: str) -> str:
    if fmt == "json":
        return json.dumps({"domain": domain, **result.to_payload()}, ensure_ascii=False, indent=2)

    lines = [
        f"{domain}: {result.status.value.upper()}  score={result.score}  confidence={result.confidence}%",
    ]
    for s in result.signals:
        sign = "+" if s.weight >= 0 else ""
        lines.append(f"  {sign}{s.weight:<4} {s.label} (x{s.match_count})")
    if not result.signals:
        lines.append("  no signals")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _open_cache(args: argparse.Namespace) -> ResultCacheProtocol:
    if getattr(args, "no_cache", False):
        return InMemoryResultCache()
    try:
        cache = await SqliteResultCache.create(args.db_path)
    except (OSError, aiosqlite.Error, ValueError) as e:
        logger.warning("Cache unavailable at %s (%s), using an in-memory cache", args.db_path, e)
        return InMemoryResultCache()
    try:
        removed = await cache.purge_expired()
    except CacheError as e:
        logger.warning("Purging expired cache entries failed (%s)", e.reason.value)
    else:
        if removed:
            logger.debug("Purged %d expired cache entries", removed)
    return cache


async def _fetch_document(client: httpx.AsyncClient, url: str) -> HtmlDocument | None:
    """Fetch the page itself so it can act as the current document."""
    try:
        response = await client.get(url, timeout=_PAGE_FETCH_TIMEOUT)
    except httpx.HTTPError as e:
        logger.warning("Could not fetch %s: %s", url, e)
        return None
    if not response.is_success or "text/html" not in response.headers.get("content-type", "").lower():
        logger.info("No HTML document at %s (status %d)", url, response.status_code)
        return None
    return HtmlDocument.from_html(response.text)


async def cmd_check(args: argparse.Namespace) -> int:
    url = args.url if "://" in args.url else f"https://{args.url}"
    cache = await _open_cache(args)
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(args.timeout),
            headers={"User-Agent": USER_AGENT},
        ) as client:
            document = await _fetch_document(client, url)
            prober = SiteProber(client, timeout=args.timeout, max_concurrency=args.concurrency)
            service = ShieldService(cache, prober=prober)
            result = await service.analyze(url, document, use_cache=not args.no_cache)
    finally:
        if isinstance(cache, SqliteResultCache):
            await cache.close()

    domain = httpx.URL(url).host
    print(format_result(result, domain=domain, fmt=args.format))
    return 0


async def cmd_score(args: argparse.Namespace) -> int:
    raw = Path(args.file).read_text(encoding="utf-8", errors="replace")
    text = strip_html(raw) if args.html else raw
    result = score_text(text, args.domain)
    print(format_result(result, domain=args.domain or args.file, fmt=args.format))
    return 0


async def cmd_clear(args: argparse.Namespace) -> int:
    cache = await SqliteResultCache.create(args.db_path)
    try:
        await cache.clear(args.domain)
    finally:
        await cache.close()
    print(f"Cleared cached result for {args.domain}")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="EU Shield: is this website's operator plausibly EU/EEA-based?",
        prog="eushield",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines on stderr")
    parser.add_argument("--db-path", default="", help=f"Cache database (default: {DEFAULT_DB_PATH})")
    parser.add_argument("--timeout", type=float, default=None, help="Per-path probe timeout in seconds")
    parser.add_argument("--concurrency", type=int, default=None, help="Parallel probes per site")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_check = subparsers.add_parser(
        "check",
        help="Analyze a live site",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s https://example.de/impressum      Analyze from a legal page
  %(prog)s example.com --format json         JSON result on stdout
  %(prog)s example.com --no-cache            Ignore and do not write the cache""",
    )
    p_check.add_argument("url", help="Page URL (scheme optional)")
    p_check.add_argument("--no-cache", action="store_true", help="Bypass the result cache")
    p_check.add_argument("--format", choices=["json", "text"], default="text")

    p_score = subparsers.add_parser("score", help="Score a local text or HTML file")
    p_score.add_argument("file")
    p_score.add_argument("--domain", default=None, help="Site hostname (enables the EU TLD bonus)")
    p_score.add_argument("--html", action="store_true", help="Strip markup before scoring")
    p_score.add_argument("--format", choices=["json", "text"], default="text")

    p_clear = subparsers.add_parser("clear", help="Drop the cached result for a domain")
    p_clear.add_argument("domain")

    return parser


_COMMANDS = {"check": cmd_check, "score": cmd_score, "clear": cmd_clear}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = apply_env(parser.parse_args(argv))

    logging_config.configure(json_output=args.json_logs, level=args.log_level)

    try:
        code = asyncio.run(_COMMANDS[args.command](args))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except SystemExit:
        raise
    except Exception as e:
        print(f"error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc(file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
