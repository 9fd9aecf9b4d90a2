"""Receipt image analysis via the OpenAI Responses API.

Public API:
    - :func:`analyze_receipt_image`
    - :func:`make_analyzer`

The call is opaque to the rest of the package: image bytes go in and the raw
model text comes out. Decoding lives in :mod:`expense_intake.ai_response`.
No client is created at import time.
"""

from __future__ import annotations

import base64
import time
from collections.abc import Callable
from typing import Any

from openai import OpenAI, OpenAIError

from . import prompting
from .config import load_settings
from .errors import AnalysisError, EmptyResponseError
from .logging_setup import get_logger

_logger = get_logger("expense_intake.receipt_analyzer")

DEFAULT_MIME_TYPE = "image/jpeg"

# Suffix → MIME type for the image formats the Responses API accepts.
_MIME_BY_SUFFIX: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def guess_mime_type(filename: str) -> str:
    """Return the image MIME type for ``filename`` (JPEG when unknown)."""

    lower = filename.lower()
    for suffix, mime in _MIME_BY_SUFFIX.items():
        if lower.endswith(suffix):
            return mime
    return DEFAULT_MIME_TYPE


def _create_client() -> OpenAI:
    return OpenAI()


def _to_data_url(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def _extract_response_text(resp: Any) -> str | None:
    """Locate the text output of a Responses SDK result.

    Prefers ``resp.output_text``; falls back to ``resp.output[0].content[0].text``
    (a plain string, or an object with a ``value`` string).
    """

    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text:
        return text
    output = getattr(resp, "output", None)
    if not output:
        return None
    content = getattr(output[0], "content", None)
    if not content:
        return None
    txt_obj = getattr(content[0], "text", None)
    if isinstance(txt_obj, str):
        return txt_obj
    maybe_val = getattr(txt_obj, "value", None)
    return maybe_val if isinstance(maybe_val, str) else None


def analyze_receipt_image(
    image_bytes: bytes,
    *,
    mime_type: str = DEFAULT_MIME_TYPE,
    client: Any | None = None,
    model: str | None = None,
    timeout: float | None = None,
) -> str:
    """Send one receipt image to the model and return its raw text reply.

    Parameters
    ----------
    image_bytes:
        Encoded image (JPEG/PNG/...). Sent inline as a base64 data URL.
    mime_type:
        MIME type of ``image_bytes``.
    client:
        Optional pre-built client exposing ``responses.create``. A new
        ``OpenAI()`` client is created when omitted.
    model / timeout:
        Override ``EXPENSE_INTAKE_MODEL`` / ``EXPENSE_INTAKE_AI_TIMEOUT``.

    Raises
    ------
    EmptyResponseError
        The model returned no text.
    AnalysisError
        The SDK call failed (network, authentication, rate limit, timeout).
    """

    if not image_bytes:
        raise AnalysisError("Receipt image is empty")

    settings = load_settings()
    model_name = model or settings.model
    timeout_sec = timeout if timeout is not None else settings.ai_timeout_sec

    user_content = [
        {"type": "input_text", "text": prompting.build_user_content()},
        {"type": "input_image", "image_url": _to_data_url(image_bytes, mime_type)},
    ]

    _logger.info(
        "analyze_receipt_image:request model=%s bytes=%d mime=%s",
        model_name,
        len(image_bytes),
        mime_type,
    )
    t0 = time.perf_counter()
    try:
        api = client if client is not None else _create_client()
        resp = api.responses.create(
            model=model_name,
            instructions=prompting.build_system_instructions(),
            input=[{"role": "user", "content": user_content}],
            timeout=timeout_sec,
        )
    except OpenAIError as e:
        _logger.warning("analyze_receipt_image:error %s", e)
        raise AnalysisError(f"Receipt analysis request failed: {e}") from e

    text = _extract_response_text(resp)
    dt_ms = (time.perf_counter() - t0) * 1000.0
    _logger.info(
        "analyze_receipt_image:done chars=%d latency_ms=%.2f", len(text or ""), dt_ms
    )
    if not text or not text.strip():
        raise EmptyResponseError()
    return text


def make_analyzer(
    *,
    mime_type: str = DEFAULT_MIME_TYPE,
    client: Any | None = None,
    model: str | None = None,
    timeout: float | None = None,
) -> Callable[[bytes], str]:
    """Bind options into the ``bytes -> str`` callable the reconciler expects."""

    def _analyze(image_bytes: bytes) -> str:
        return analyze_receipt_image(
            image_bytes, mime_type=mime_type, client=client, model=model, timeout=timeout
        )

    return _analyze


__all__ = [
    "DEFAULT_MIME_TYPE",
    "guess_mime_type",
    "analyze_receipt_image",
    "make_analyzer",
]
