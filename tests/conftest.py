"""Shared fixtures for the slashwire test suite."""

import logging

import pytest
import structlog

from slashwire.logging_config import LOGGER_PREFIX, SUBSYSTEMS


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo any setup_logging() call made by a test."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    for name in (LOGGER_PREFIX, *(f"{LOGGER_PREFIX}.{s}" for s in SUBSYSTEMS)):
        named = logging.getLogger(name)
        for handler in named.handlers:
            handler.close()
        named.handlers.clear()
    structlog.reset_defaults()
