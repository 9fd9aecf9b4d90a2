"""Editable batch reconciliation for scanned receipts.

A :class:`BatchReconciler` walks one scan through an explicit state machine::

    Empty ──begin_scan──▶ Scanning ──complete_scan──▶ Ready ──commit──▶ Committed
                            │  ▲                        │
                            │  └──────begin_scan────┐   │
                            └──fail_scan──▶ Failed ─┘   │
                                                         └─ edit / delete (stay Ready)

The reconciler holds exactly one state value. Each operation checks the
current state and raises :class:`InvalidTransitionError` when it is not
permitted there, so, for example, an edit or commit during ``Scanning`` can
never touch the store. ``cancel()`` returns to ``Empty`` from any state except
``Committed``.

Commit normalizes each surviving item in batch order:

1. ``date`` parses with ``%Y-%m-%d``; on failure it becomes today's date
   (the CSV path rejects bad dates instead; the two paths differ on purpose).
2. ``category`` maps through :meth:`Category.from_label`.
3. ``note`` is empty, ``None`` locations become ``""`` and the record carries
   the scanned image's fingerprint.
4. The record is inserted. Each insert is independent; a failing item is
   recorded in its :class:`CommitResult` and the loop continues. Nothing is
   rolled back.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .ai_response import parse_ai_response
from .errors import (
    AiResponseError,
    ExpenseIntakeError,
    InvalidEditError,
    InvalidTransitionError,
    StoreError,
    UnknownItemError,
)
from .logging_setup import get_logger
from .models import (
    MAX_AMOUNT,
    Category,
    EditableBatchItem,
    ExpenseRecord,
    compute_image_fingerprint,
)
from .store import ExpenseStore

AI_DATE_FORMAT = "%Y-%m-%d"

_logger = get_logger("expense_intake.reconcile")

# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Empty:
    """No scan in progress."""


@dataclass(frozen=True, slots=True)
class Scanning:
    """An image was submitted; waiting for the analysis backend."""

    image_fingerprint: str = ""


@dataclass(slots=True)
class Ready:
    """A decoded batch the user may edit, delete from, and commit."""

    items: list[EditableBatchItem] = field(default_factory=list)
    image_fingerprint: str = ""


@dataclass(frozen=True, slots=True)
class Failed:
    """The scan failed; ``message`` is suitable for showing to the user."""

    message: str
    error: Exception | None = None


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Outcome of committing one batch item."""

    item_id: str
    record: ExpenseRecord | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class Committed:
    """Terminal state: the batch was written to the store."""

    results: tuple[CommitResult, ...] = ()


type BatchState = Empty | Scanning | Ready | Failed | Committed

type ImageAnalyzer = Callable[[bytes], str | None]
"""Opaque backend call: image bytes in, raw model text (or ``None``) out."""


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_ai_date(raw: str, today: date) -> date:
    """Parse ``YYYY-MM-DD``; fall back to ``today`` instead of failing."""

    try:
        return datetime.strptime(raw, AI_DATE_FORMAT).date()
    except (TypeError, ValueError):
        return today


def item_to_record(
    item: EditableBatchItem, *, today: date, image_fingerprint: str = ""
) -> ExpenseRecord:
    """Build the canonical record for a reviewed batch item.

    Raises ``ValueError`` when the item cannot form a valid record (a negative
    amount from the model that the user did not correct).
    """

    return ExpenseRecord(
        date=normalize_ai_date(item.date, today),
        title=item.title,
        amount=item.amount,
        category=Category.from_label(item.category),
        is_business=item.is_business,
        note="",
        location_from=item.location_from or "",
        location_to=item.location_to or "",
        source_image_hash=image_fingerprint,
    )


# ---------------------------------------------------------------------------
# Edit validation
# ---------------------------------------------------------------------------


def _check_str(name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise InvalidEditError(f"{name} must be a string")


def _check_optional_str(name: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise InvalidEditError(f"{name} must be a string or None")


def _check_amount(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidEditError(f"{name} must be an integer")
    if not 0 <= value <= MAX_AMOUNT:
        raise InvalidEditError(f"{name} must be between 0 and {MAX_AMOUNT}")


def _check_bool(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise InvalidEditError(f"{name} must be a boolean")


_EDIT_CHECKS: dict[str, Callable[[str, Any], None]] = {
    "date": _check_str,
    "title": _check_str,
    "amount": _check_amount,
    "category": _check_str,
    "is_business": _check_bool,
    "location_from": _check_optional_str,
    "location_to": _check_optional_str,
}

EDITABLE_FIELDS: tuple[str, ...] = tuple(_EDIT_CHECKS)


# ---------------------------------------------------------------------------
# Reconciler
# ---------------------------------------------------------------------------


class BatchReconciler:
    """Owns one scan's lifecycle from image submission to commit.

    Parameters
    ----------
    today:
        Clock used for the date fallback at commit time. Evaluated once per
        commit so every defaulted item in a batch gets the same date.
    """

    def __init__(self, *, today: Callable[[], date] = date.today) -> None:
        self._state: BatchState = Empty()
        self._today = today

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def items(self) -> tuple[EditableBatchItem, ...]:
        """Current batch items in order (only while ``Ready``)."""

        return tuple(self._require_ready("read items").items)

    def _require_ready(self, operation: str) -> Ready:
        state = self._state
        if not isinstance(state, Ready):
            raise InvalidTransitionError(operation, type(state).__name__)
        return state

    def _transition(self, new_state: BatchState) -> None:
        _logger.debug(
            "Batch state %s -> %s", type(self._state).__name__, type(new_state).__name__
        )
        self._state = new_state

    # ---- scan lifecycle ---------------------------------------------------

    def begin_scan(self, image_fingerprint: str = "") -> None:
        """Enter ``Scanning``; allowed from ``Empty`` and ``Failed`` (retry)."""

        if not isinstance(self._state, Empty | Failed):
            raise InvalidTransitionError("begin a scan", type(self._state).__name__)
        self._transition(Scanning(image_fingerprint=image_fingerprint))

    def complete_scan(self, raw_text: str | None) -> BatchState:
        """Decode the backend text and move to ``Ready`` or ``Failed``."""

        state = self._state
        if not isinstance(state, Scanning):
            raise InvalidTransitionError("complete a scan", type(state).__name__)
        try:
            parsed = parse_ai_response(raw_text)
        except AiResponseError as e:
            self._transition(Failed(message=str(e), error=e))
            return self._state
        self._transition(
            Ready(
                items=[EditableBatchItem.from_parsed(p) for p in parsed],
                image_fingerprint=state.image_fingerprint,
            )
        )
        return self._state

    def fail_scan(self, message: str, error: Exception | None = None) -> BatchState:
        """Record a backend failure for the current scan."""

        if not isinstance(self._state, Scanning):
            raise InvalidTransitionError("fail a scan", type(self._state).__name__)
        self._transition(Failed(message=message, error=error))
        return self._state

    def cancel(self) -> None:
        """Abandon the current scan or batch without touching the store."""

        if isinstance(self._state, Committed):
            raise InvalidTransitionError("cancel", "Committed")
        self._transition(Empty())

    def scan(self, image_bytes: bytes, analyzer: ImageAnalyzer) -> BatchState:
        """Run one scan end to end: fingerprint, analyze, decode.

        Analyzer failures end in ``Failed`` with a readable message. If the
        analyzer is interrupted (``KeyboardInterrupt``, task cancellation) the
        batch returns to ``Empty`` and the interruption propagates.
        """

        self.begin_scan(compute_image_fingerprint(image_bytes))
        try:
            raw_text = analyzer(image_bytes)
        except ExpenseIntakeError as e:
            _logger.warning("Receipt analysis failed: %s", e)
            return self.fail_scan(str(e), e)
        except Exception as e:
            _logger.exception("Receipt analysis raised an unexpected error")
            return self.fail_scan(f"Receipt analysis failed: {e}", e)
        except BaseException:
            self._transition(Empty())
            raise
        return self.complete_scan(raw_text)

    # ---- editing ------------------------------------------------------------

    def _find(self, ready: Ready, item_id: str) -> int:
        for pos, item in enumerate(ready.items):
            if item.item_id == item_id:
                return pos
        raise UnknownItemError(item_id)

    def get(self, item_id: str) -> EditableBatchItem:
        ready = self._require_ready("read an item")
        return ready.items[self._find(ready, item_id)]

    def edit(self, item_id: str, **changes: Any) -> EditableBatchItem:
        """Replace fields of one item in place; all-or-nothing per call."""

        ready = self._require_ready("edit")
        item = ready.items[self._find(ready, item_id)]
        unknown = sorted(set(changes) - set(_EDIT_CHECKS))
        if unknown:
            raise InvalidEditError(f"Unknown field(s): {', '.join(unknown)}")
        for name, value in changes.items():
            _EDIT_CHECKS[name](name, value)
        for name, value in changes.items():
            setattr(item, name, value)
        return item

    def delete(self, item_id: str) -> None:
        ready = self._require_ready("delete")
        del ready.items[self._find(ready, item_id)]

    # ---- commit ---------------------------------------------------------------

    def commit(self, store: ExpenseStore) -> list[CommitResult]:
        """Insert every surviving item in batch order and end the flow.

        An empty batch performs no store operation. Items are removed from the
        batch as they are inserted, so if an unexpected error escapes the loop
        the batch still in ``Ready`` holds only items that were not written.
        """

        ready = self._require_ready("commit")
        today = self._today()
        results: list[CommitResult] = []
        for item in list(ready.items):
            try:
                record = item_to_record(
                    item, today=today, image_fingerprint=ready.image_fingerprint
                )
                store.insert(record)
            except (ValueError, StoreError) as e:
                _logger.exception("Failed to commit batch item %s", item.item_id)
                results.append(CommitResult(item_id=item.item_id, error=e))
                ready.items.remove(item)
                continue
            results.append(CommitResult(item_id=item.item_id, record=record))
            ready.items.remove(item)

        committed = sum(1 for r in results if r.ok)
        _logger.info("Committed %d of %d batch item(s)", committed, len(results))
        self._transition(Committed(results=tuple(results)))
        return results


__all__ = [
    "AI_DATE_FORMAT",
    "EDITABLE_FIELDS",
    "BatchState",
    "ImageAnalyzer",
    "Empty",
    "Scanning",
    "Ready",
    "Failed",
    "Committed",
    "CommitResult",
    "BatchReconciler",
    "normalize_ai_date",
    "item_to_record",
]
