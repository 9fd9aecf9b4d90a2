"""Data models for ``expense_intake``.

Three shapes move through the pipeline:

- :class:`ExpenseRecord`: the canonical, validated record that the store
  persists. Immutable; edits produce a new value with the same ``id``.
- :class:`ParsedAiItem`: the strict decode target for one element of the AI
  JSON array. Its ``date`` and ``category`` are still untrusted strings.
- :class:`EditableBatchItem`: a mutable, id-addressable copy of a
  :class:`ParsedAiItem` held by the reconciler while the user reviews a scan.

:class:`Category` is the closed set of expense categories. Its values are the
canonical wire labels shared by the CSV format and the AI JSON contract.
"""

from __future__ import annotations

import dataclasses
import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------


class Category(StrEnum):
    """Closed expense category set; values are the canonical wire labels."""

    FOOD = "食費"
    DAILY = "生活・日用品"
    TRANSPORT = "交通費"
    ENTERTAINMENT = "エンタメ"
    HEALTH = "健康・美容"
    FIXED = "固定費"
    INVESTMENT = "自己投資"
    SPECIAL = "特別支出"
    OTHER = "その他"

    @property
    def label(self) -> str:
        return self.value

    @property
    def icon(self) -> str:
        """Presentation icon tag (opaque to this package)."""

        return _ICONS[self]

    @classmethod
    def from_label(cls, label: Any) -> Category:
        """Map an arbitrary value to a category; never raises.

        Only an exact label match selects a variant. Everything else, including
        ``None``, non-strings and labels with stray whitespace, yields
        :attr:`Category.OTHER`. Callers that want whitespace tolerance strip
        before calling.
        """

        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            return cls.OTHER
        return _BY_LABEL.get(label, cls.OTHER)


_BY_LABEL: dict[str, Category] = {c.value: c for c in Category}

_ICONS: dict[Category, str] = {
    Category.FOOD: "fork.knife",
    Category.DAILY: "cart.fill",
    Category.TRANSPORT: "tram.fill",
    Category.ENTERTAINMENT: "gamecontroller.fill",
    Category.HEALTH: "heart.text.square.fill",
    Category.FIXED: "house.fill",
    Category.INVESTMENT: "book.closed.fill",
    Category.SPECIAL: "gift.fill",
    Category.OTHER: "ellipsis.circle",
}

CATEGORY_LABELS: tuple[str, ...] = tuple(c.value for c in Category)

# Amounts are stored as signed 64-bit integers.
MAX_AMOUNT = 2**63 - 1


def compute_image_fingerprint(image_bytes: bytes) -> str:
    """Return the SHA-256 hex digest stored as ``source_image_hash``."""

    return hashlib.sha256(image_bytes).hexdigest()


# ---------------------------------------------------------------------------
# Canonical record
# ---------------------------------------------------------------------------

_TEXT_FIELDS: tuple[str, ...] = (
    "title",
    "note",
    "location_from",
    "location_to",
    "source_image_hash",
)


@dataclass(frozen=True, slots=True)
class ExpenseRecord:
    """A validated expense, eligible for persistence.

    Attributes
    ----------
    date:
        Calendar date of the expense (a ``datetime`` is rejected).
    title:
        Free-text label, stored verbatim.
    amount:
        Integer currency amount, never negative.
    category:
        One of the nine :class:`Category` variants.
    is_business:
        Whether the expense is a business expense. Defaults to ``False``.
    note / location_from / location_to:
        Optional free text; empty string when absent.
    source_image_hash:
        Fingerprint of the receipt image the record came from, or ``""``.
        Carried for future duplicate detection; nothing enforces uniqueness.
    synced_to_sheets:
        External sync bookkeeping. Never changed by this package.
    id:
        Stable identifier assigned at creation.
    """

    date: date
    title: str
    amount: int
    category: Category = Category.OTHER
    is_business: bool = False
    note: str = ""
    location_from: str = ""
    location_to: str = ""
    source_image_hash: str = ""
    synced_to_sheets: bool = False
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        if isinstance(self.date, datetime) or not isinstance(self.date, date):
            raise TypeError(
                f"ExpenseRecord.date must be a datetime.date, got {type(self.date).__name__}"
            )
        # Booleans are ints; disallow them explicitly.
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(
                f"ExpenseRecord.amount must be an int, got {type(self.amount).__name__}"
            )
        if not 0 <= self.amount <= MAX_AMOUNT:
            raise ValueError(
                f"ExpenseRecord.amount must be between 0 and {MAX_AMOUNT}, got {self.amount}"
            )
        if not isinstance(self.category, Category):
            raise TypeError(
                "ExpenseRecord.category must be a Category; "
                "use Category.from_label() to map raw labels"
            )
        for name in _TEXT_FIELDS:
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"ExpenseRecord.{name} must be a string")
        if not isinstance(self.is_business, bool) or not isinstance(self.synced_to_sheets, bool):
            raise TypeError("ExpenseRecord flags must be booleans")
        if not isinstance(self.id, uuid.UUID):
            raise TypeError("ExpenseRecord.id must be a uuid.UUID")

    def with_changes(self, **changes: Any) -> ExpenseRecord:
        """Return a re-validated copy with ``changes`` applied; ``id`` is fixed."""

        if "id" in changes:
            raise ValueError("ExpenseRecord.id is immutable")
        unknown = sorted(set(changes) - {f.name for f in dataclasses.fields(self)})
        if unknown:
            raise ValueError(f"Unknown ExpenseRecord field(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **changes)


# ---------------------------------------------------------------------------
# AI decode target and editable batch item
# ---------------------------------------------------------------------------


class ParsedAiItem(BaseModel):
    """One element of the AI JSON array, decoded strictly but not normalized.

    ``date`` is expected as ``YYYY-MM-DD`` and ``category`` as a canonical
    label, but neither is checked here: both are normalized at commit time so
    the user can review and correct raw model output first.
    """

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)

    date: str
    title: str
    amount: int = Field(ge=-MAX_AMOUNT - 1, le=MAX_AMOUNT)
    category: str
    is_business: bool
    location_from: str | None = None
    location_to: str | None = None


@dataclass(slots=True)
class EditableBatchItem:
    """Mutable, id-addressable copy of a :class:`ParsedAiItem`."""

    item_id: str
    date: str
    title: str
    amount: int
    category: str
    is_business: bool
    location_from: str | None = None
    location_to: str | None = None

    @classmethod
    def from_parsed(cls, parsed: ParsedAiItem, *, item_id: str | None = None) -> EditableBatchItem:
        return cls(
            item_id=item_id or str(uuid.uuid4()),
            date=parsed.date,
            title=parsed.title,
            amount=parsed.amount,
            category=parsed.category,
            is_business=parsed.is_business,
            location_from=parsed.location_from,
            location_to=parsed.location_to,
        )


__all__ = [
    "Category",
    "CATEGORY_LABELS",
    "MAX_AMOUNT",
    "compute_image_fingerprint",
    "ExpenseRecord",
    "ParsedAiItem",
    "EditableBatchItem",
]
