"""Decoding of receipt-analysis output into provisional batch items.

The backend is asked for a bare JSON array but sometimes wraps it in a
Markdown code fence. :func:`parse_ai_response` removes one such wrapper and
then decodes strictly. Unlike the CSV path this is all-or-nothing: a JSON
array cannot be partially trusted, so any defect fails the whole batch.

Dates and category labels are returned exactly as the model wrote them;
normalization happens when the reviewed batch is committed.
"""

from __future__ import annotations

import re

from pydantic import TypeAdapter, ValidationError

from .errors import DecodeError, EmptyResponseError
from .logging_setup import get_logger
from .models import ParsedAiItem

_logger = get_logger("expense_intake.ai_response")

# An opening fence may carry a language tag (```json, ```JSON, ...).
_OPEN_FENCE_RE = re.compile(r"\A```[A-Za-z0-9_-]*[ \t]*(?:\r?\n)?")
_CLOSE_FENCE_RE = re.compile(r"(?:\r?\n)?[ \t]*```\Z")

_ITEMS_ADAPTER: TypeAdapter[list[ParsedAiItem]] = TypeAdapter(list[ParsedAiItem])

_PREVIEW_CHARS = 200


def strip_code_fence(text: str) -> str:
    """Remove one leading and one trailing code fence, then trim whitespace.

    Text without a fence is only trimmed.
    """

    s = text.strip()
    s = _OPEN_FENCE_RE.sub("", s, count=1)
    s = _CLOSE_FENCE_RE.sub("", s, count=1)
    return s.strip()


def _summarize(err: ValidationError) -> str:
    details = err.errors(include_url=False)
    if not details:
        return str(err)
    first = details[0]
    loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
    more = f" (+{len(details) - 1} more)" if len(details) > 1 else ""
    return f"{loc}: {first.get('msg', 'invalid value')}{more}"


def parse_ai_response(raw_text: str | None) -> list[ParsedAiItem]:
    """Decode the backend's text into :class:`ParsedAiItem` values.

    Raises
    ------
    EmptyResponseError
        ``raw_text`` is ``None``, empty, or whitespace only.
    DecodeError
        The cleaned text is not a JSON array whose elements all match the
        item shape (wrong types, missing required keys, trailing text,
        truncated output). ``DecodeError.raw_text`` holds the original text.
    """

    if raw_text is None or not raw_text.strip():
        raise EmptyResponseError()

    cleaned = strip_code_fence(raw_text)
    if not cleaned:
        raise DecodeError(raw_text, "response contained only a code fence")

    try:
        items = _ITEMS_ADAPTER.validate_json(cleaned)
    except ValidationError as e:
        reason = _summarize(e)
        _logger.warning(
            "AI response decode failed: %s; raw preview=%r", reason, raw_text[:_PREVIEW_CHARS]
        )
        raise DecodeError(raw_text, reason) from e

    _logger.debug("Decoded %d item(s) from AI response", len(items))
    return items


__all__ = ["strip_code_fence", "parse_ai_response"]
