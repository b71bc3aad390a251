"""Root pytest configuration for all tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest


@pytest.fixture
def restore_package_loggers() -> Generator[None, None, None]:
    """Undo logging.config changes made to the package loggers by a test."""
    names = ("domain", "infrastructure")
    saved = {}
    for name in names:
        lg = logging.getLogger(name)
        saved[name] = (list(lg.handlers), lg.level, lg.propagate)
    try:
        yield
    finally:
        for name, (handlers, level, propagate) in saved.items():
            lg = logging.getLogger(name)
            lg.handlers[:] = handlers
            lg.setLevel(level)
            lg.propagate = propagate
