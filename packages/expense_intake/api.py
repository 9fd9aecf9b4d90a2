"""Public API interfaces and orchestration for the ``expense_intake`` package.

This module is mainly a stable import surface: CSV import and the scan flow
live in :mod:`expense_intake.ingest` and :mod:`expense_intake.workflows` and
are re-exported here. The small history/entry operations are implemented
directly.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import date

from .ingest.utils import import_csv_file
from .logging_setup import get_logger
from .models import Category, ExpenseRecord
from .store import ExpenseStore
from .summary import current_month_summary, summarize_month
from .workflows.scan_flow import ScanOutcome, scan_receipt, scan_receipt_file

_logger = get_logger("expense_intake.api")


def add_manual_expense(
    store: ExpenseStore,
    *,
    title: str,
    amount: int,
    category: Category = Category.FOOD,
    expense_date: date | None = None,
    is_business: bool = False,
    note: str = "",
    location_from: str = "",
    location_to: str = "",
    today: Callable[[], date] = date.today,
) -> ExpenseRecord:
    """Create and insert one hand-entered expense.

    The title must be non-blank (it is stored as given) and the amount must be
    a non-negative integer. ``expense_date`` defaults to ``today()``.

    Raises
    ------
    ValueError
        Blank title or negative amount.
    TypeError
        Wrongly typed field (see :class:`ExpenseRecord`).
    """

    if not isinstance(title, str) or not title.strip():
        raise ValueError("title must not be empty")
    record = ExpenseRecord(
        date=expense_date if expense_date is not None else today(),
        title=title,
        amount=amount,
        category=category,
        is_business=is_business,
        note=note,
        location_from=location_from,
        location_to=location_to,
    )
    store.insert(record)
    _logger.info("Added manual expense %s (%s, %d)", record.id, record.category, record.amount)
    return record


def list_expenses(store: ExpenseStore) -> list[ExpenseRecord]:
    """Return every stored expense, newest date first."""

    return store.query_all()


def delete_expense(store: ExpenseStore, record_id: uuid.UUID | str) -> None:
    """Delete one expense by id (a UUID or its string form).

    Raises ``ValueError`` for a malformed id string and
    :class:`~expense_intake.errors.RecordNotFoundError` for an unknown id.
    """

    rid = record_id if isinstance(record_id, uuid.UUID) else uuid.UUID(str(record_id))
    store.delete(rid)
    _logger.info("Deleted expense %s", rid)


__all__ = [
    "import_csv_file",
    "scan_receipt",
    "scan_receipt_file",
    "ScanOutcome",
    "add_manual_expense",
    "list_expenses",
    "delete_expense",
    "summarize_month",
    "current_month_summary",
]
