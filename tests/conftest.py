# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import eushield  # noqa: F401
except ImportError:
    raise ImportError("eushield is not installed. Run: pip install -e '.[test]'") from None

import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging():
    """Keep root logger and structlog state isolated between tests."""
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
