"""Logging for the ``expense_intake`` package.

Library modules call ``get_logger("expense_intake.<module>")`` and stay silent
(a ``NullHandler`` on the package logger) until an entrypoint calls
:func:`configure_logging`. The CLI does that once per process.

At ``DEBUG`` the OpenAI SDK and its HTTP client are routed to the same
handler, so a receipt scan can be traced request by request next to the
reconciler's state transitions.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from .config import load_settings

_PKG_LOGGER_NAME = "expense_intake"
# Third-party loggers worth seeing when debugging a scan.
_SDK_LOGGER_NAMES = ("openai", "httpx")
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_CONFIGURED = False


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or ``EXPENSE_INTAKE_LOG_LEVEL``) into a numeric level.

    Level names are case-insensitive. An unknown name passed explicitly raises
    ``ValueError``; an unknown name from the environment falls back to INFO so
    a typo in ``.env`` never stops the CLI.
    """

    if isinstance(level, int):
        return level
    from_env = level is None
    name = load_settings().log_level if from_env else level
    if not name:
        return logging.INFO
    numeric = logging.getLevelNamesMapping().get(name.strip().upper())
    if numeric is not None:
        return numeric
    if from_env:
        return logging.INFO
    raise ValueError(f"Unknown log level: {level!r}")


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach one ``StreamHandler`` to the package logger; later calls are no-ops.

    Parameters
    ----------
    level:
        Numeric level or level name. ``None`` reads ``EXPENSE_INTAKE_LOG_LEVEL``
        and defaults to INFO.
    fmt:
        Format string; :data:`DEFAULT_FORMAT` when omitted.
    stream:
        Destination of log lines (``sys.stderr`` by default, keeping stdout
        for command output).
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)
    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    if resolved <= logging.DEBUG:
        for name in _SDK_LOGGER_NAMES:
            sdk_logger = logging.getLogger(name)
            sdk_logger.setLevel(resolved)
            sdk_logger.addHandler(handler)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["DEFAULT_FORMAT", "resolve_level", "configure_logging", "get_logger"]
