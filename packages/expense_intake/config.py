"""Runtime settings resolved from the environment.

The CLI loads a local ``.env`` (python-dotenv, without overriding variables
already set) before calling :func:`load_settings`. Library functions take
explicit arguments and only fall back to these settings when an argument is
omitted.

Variables
---------
``DATABASE_URL``
    SQLAlchemy URL for :class:`~expense_intake.persistence.SqlExpenseStore`.
``OPENAI_API_KEY``
    Read by the OpenAI SDK itself; only checked for presence here.
``EXPENSE_INTAKE_MODEL``
    Model used for receipt analysis (default ``gpt-5``).
``EXPENSE_INTAKE_AI_TIMEOUT``
    Per-request timeout in seconds for the analysis call (default ``60``).
``EXPENSE_INTAKE_LOG_LEVEL``
    Level name for :func:`~expense_intake.logging_setup.configure_logging`
    (default ``INFO``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MODEL = "gpt-5"
DEFAULT_AI_TIMEOUT_SEC = 60.0


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str | None
    openai_api_key: str | None
    model: str
    ai_timeout_sec: float
    log_level: str | None = None


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_AI_TIMEOUT_SEC
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_AI_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_AI_TIMEOUT_SEC


def load_settings() -> Settings:
    """Snapshot the relevant environment variables."""

    model = (os.getenv("EXPENSE_INTAKE_MODEL") or "").strip() or DEFAULT_MODEL
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        model=model,
        ai_timeout_sec=_parse_timeout(os.getenv("EXPENSE_INTAKE_AI_TIMEOUT")),
        log_level=(os.getenv("EXPENSE_INTAKE_LOG_LEVEL") or "").strip() or None,
    )


__all__ = ["Settings", "load_settings", "DEFAULT_MODEL", "DEFAULT_AI_TIMEOUT_SEC"]
