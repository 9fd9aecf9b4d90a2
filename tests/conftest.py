"""Pytest configuration for test isolation.

Tests must never see the developer's real environment: a ``DATABASE_URL`` or
``OPENAI_API_KEY`` exported in the shell (or loaded from a ``.env`` by an
earlier CLI test) would send test writes to a real database or make a real
API call. An autouse fixture clears those variables for every test.

The CLI configures package logging once per process and turns off
propagation, which would hide records from ``caplog`` in later tests; a
second autouse fixture restores library-mode logging after each test.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from db.client import dispose_engines
from expense_intake import logging_setup

_ISOLATED_ENV = (
    "DATABASE_URL",
    "OPENAI_API_KEY",
    "EXPENSE_INTAKE_MODEL",
    "EXPENSE_INTAKE_AI_TIMEOUT",
    "EXPENSE_INTAKE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger("expense_intake")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    for name in ("openai", "httpx"):
        sdk_logger = logging.getLogger(name)
        for h in list(sdk_logger.handlers):
            sdk_logger.removeHandler(h)
        sdk_logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False


@pytest.fixture(autouse=True)
def _dispose_engines() -> Iterator[None]:
    yield
    dispose_engines()
