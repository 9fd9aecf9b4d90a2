"""Prompt construction for receipt analysis.

The backend is asked for a bare JSON array of line items. The category list
is rendered from :data:`~expense_intake.models.CATEGORY_LABELS` so the prompt
and the decoder can never disagree on the allowed labels.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from .models import CATEGORY_LABELS

# Field order of one item as shown to the model.
ITEM_FIELD_ORDER: tuple[str, ...] = (
    "date",
    "title",
    "amount",
    "category",
    "is_business",
    "location_from",
    "location_to",
)


def build_system_instructions() -> str:
    """Return the role and output rules for the analysis call."""

    return (
        "あなたは熟練の経理担当AIです。アップロードされたレシートやクレジットカード明細の"
        "画像を解析し、指定のJSON形式でデータを出力してください。"
        "Markdownのコードブロック(```jsonなど)は不要です。純粋なJSON配列のみを返してください。"
    )


def _render_item_schema(labels: Sequence[str]) -> str:
    category_choices = " | ".join(json.dumps(label, ensure_ascii=False) for label in labels)
    lines = [
        "[",
        "  {",
        '    "date": "YYYY-MM-DD",',
        '    "title": "項目名(具体的かつ簡潔に)",',
        '    "amount": 数値(通貨記号なし),',
        f'    "category": {category_choices},',
        '    "is_business": true/false (経費だと思われる場合はtrue),',
        '    "location_from": "出発地(交通費の場合のみ)",',
        '    "location_to": "到着地または店名"',
        "  }",
        "]",
    ]
    return "\n".join(lines)


def build_user_content(labels: Sequence[str] = CATEGORY_LABELS) -> str:
    """Build the text part of the user message that accompanies the image.

    - Shows the item shape with one line per field in :data:`ITEM_FIELD_ORDER`.
    - Lists every allowed category label verbatim.
    - Asks for all line items when the image holds more than one.
    """

    return (
        "以下のJSON形式で出力してください。\n\n"
        + _render_item_schema(labels)
        + "\n\n画像内に複数の明細がある場合は、すべて配列に含めてください。"
    )


__all__ = ["ITEM_FIELD_ORDER", "build_system_instructions", "build_user_content"]
