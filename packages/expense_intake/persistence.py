# ruff: noqa: I001
"""Persistence integration for expense_intake.

:class:`SqlExpenseStore` implements :class:`~expense_intake.store.ExpenseStore`
on the shared database owned by ``libs/db``. It relies on the SQLAlchemy ORM
model ``db.models.expenses.ExpenseRow`` and on sessions from ``db.client``.

Every store call runs in its own transaction, so an insert is durable when it
returns and a failed call leaves earlier writes intact.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy import delete as sa_delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.client import session_scope
from db.models.expenses import ExpenseRow
from .errors import RecordNotFoundError, StoreError
from .logging_setup import get_logger
from .models import Category, ExpenseRecord

_logger = get_logger("expense_intake.persistence")


def record_to_row_values(record: ExpenseRecord) -> dict[str, Any]:
    """Column values for ``record`` (everything except surrogate/timestamps)."""

    return {
        "record_id": str(record.id),
        "date": record.date,
        "title": record.title,
        "amount": record.amount,
        "category": record.category.value,
        "is_business": record.is_business,
        "note": record.note,
        "location_from": record.location_from,
        "location_to": record.location_to,
        "source_image_hash": record.source_image_hash,
        "synced_to_sheets": record.synced_to_sheets,
    }


def row_to_record(row: ExpenseRow) -> ExpenseRecord:
    return ExpenseRecord(
        id=uuid.UUID(row.record_id),
        date=row.date,
        title=row.title,
        amount=row.amount,
        category=Category.from_label(row.category),
        is_business=bool(row.is_business),
        note=row.note or "",
        location_from=row.location_from or "",
        location_to=row.location_to or "",
        source_image_hash=row.source_image_hash or "",
        synced_to_sheets=bool(row.synced_to_sheets),
    )


class SqlExpenseStore:
    """SQLAlchemy-backed :class:`~expense_intake.store.ExpenseStore`.

    Parameters
    ----------
    database_url:
        SQLAlchemy URL. When ``None`` the ``DATABASE_URL`` environment
        variable is used (resolved by ``db.client``).
    """

    def __init__(self, database_url: str | None = None) -> None:
        self._database_url = database_url

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with session_scope(database_url=self._database_url) as session:
                yield session
                # Some drivers reject out-of-range parameters with plain
                # Python errors that SQLAlchemy does not wrap.
                try:
                    session.flush()
                except (OverflowError, ValueError) as e:
                    _logger.error("Expense store %s failed: %s", operation, e)
                    raise StoreError(f"Expense store {operation} failed: {e}") from e
        except SQLAlchemyError as e:
            _logger.error("Expense store %s failed: %s", operation, e)
            raise StoreError(f"Expense store {operation} failed: {e}") from e

    def insert(self, record: ExpenseRecord) -> None:
        with self._session("insert") as session:
            session.add(ExpenseRow(**record_to_row_values(record)))
        _logger.debug("Inserted expense %s", record.id)

    def update(self, record_id: uuid.UUID, **fields: Any) -> ExpenseRecord:
        with self._session("update") as session:
            row = self._get_row(session, record_id)
            updated = row_to_record(row).with_changes(**fields)
            for name, value in record_to_row_values(updated).items():
                setattr(row, name, value)
            row.updated_at = func.now()
        return updated

    def delete(self, record_id: uuid.UUID) -> None:
        with self._session("delete") as session:
            result = session.execute(
                sa_delete(ExpenseRow).where(ExpenseRow.record_id == str(record_id))
            )
            if result.rowcount == 0:
                raise RecordNotFoundError(record_id)

    def get(self, record_id: uuid.UUID) -> ExpenseRecord | None:
        with self._session("get") as session:
            row = session.execute(
                select(ExpenseRow).where(ExpenseRow.record_id == str(record_id))
            ).scalar_one_or_none()
            return row_to_record(row) if row is not None else None

    def query_all(self) -> list[ExpenseRecord]:
        with self._session("query") as session:
            rows = session.execute(
                select(ExpenseRow).order_by(ExpenseRow.date.desc(), ExpenseRow.row_id.desc())
            ).scalars()
            return [row_to_record(r) for r in rows]

    def query_between(self, start: date, end: date) -> list[ExpenseRecord]:
        with self._session("query") as session:
            rows = session.execute(
                select(ExpenseRow)
                .where(ExpenseRow.date >= start, ExpenseRow.date <= end)
                .order_by(ExpenseRow.date.desc(), ExpenseRow.row_id.desc())
            ).scalars()
            return [row_to_record(r) for r in rows]

    @staticmethod
    def _get_row(session: Session, record_id: uuid.UUID) -> ExpenseRow:
        row = session.execute(
            select(ExpenseRow).where(ExpenseRow.record_id == str(record_id))
        ).scalar_one_or_none()
        if row is None:
            raise RecordNotFoundError(record_id)
        return row


__all__ = ["SqlExpenseStore", "record_to_row_values", "row_to_record"]
