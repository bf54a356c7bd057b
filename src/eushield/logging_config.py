# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""structlog + stdlib bridge for the CLI and embedding services.

Modules log through ``logging.getLogger(__name__)``; records are rendered by
structlog, human-readable on a terminal or as JSON lines with ``json_output``.
Analyses bind ``domain`` so every line emitted while scoring a site carries it.

Leaf module — no eushield imports. Safe to call early in startup.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator

import structlog
from structlog.typing import Processor

# One INFO line per probe request is noise.
_CHATTY_LOGGERS = ("httpx", "httpcore", "aiosqlite")

_PRE_CHAIN: tuple[Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
)


def resolve_level(level: str) -> int:
    """Numeric level for a name such as ``"debug"``; unknown names mean INFO."""
    value = getattr(logging, level.strip().upper(), None)
    return value if isinstance(value, int) else logging.INFO


def _stderr_handler(json_output: bool) -> logging.Handler:
    renderer: Processor = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=list(_PRE_CHAIN),
        )
    )
    return handler


def configure(*, json_output: bool = False, level: str = "INFO") -> None:
    """Route stdlib and structlog loggers through one stderr handler.

    Args:
        json_output: JSON lines instead of console output.
        level: Root logger level name (default INFO).
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_level = resolve_level(level)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(json_output))
    root.setLevel(root_level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))


@contextlib.contextmanager
def bound_domain(domain: str) -> Iterator[None]:
    """Attach ``domain=...`` to every log line emitted inside the block."""
    with structlog.contextvars.bound_contextvars(domain=domain):
        yield
