"""Store adapter interface and an in-process reference implementation.

The pipeline needs exactly the operations on :class:`ExpenseStore`. It does
not lock, retry or batch: the store owns its own synchronization and retry
policy, and every call is treated as a single, synchronous operation.

Ordering contract for queries: newest ``date`` first; records sharing a date
come back most recently inserted first.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Protocol, runtime_checkable

from .errors import RecordNotFoundError, StoreError
from .models import ExpenseRecord


@runtime_checkable
class ExpenseStore(Protocol):
    """Persistent record store used by the import and commit paths."""

    def insert(self, record: ExpenseRecord) -> None:
        """Persist ``record``; durable once this returns."""
        ...

    def update(self, record_id: uuid.UUID, **fields: Any) -> ExpenseRecord:
        """Apply ``fields`` to the stored record and return the new value."""
        ...

    def delete(self, record_id: uuid.UUID) -> None:
        """Remove the record with ``record_id``."""
        ...

    def query_all(self) -> list[ExpenseRecord]:
        """Return every record, date descending."""
        ...

    def query_between(self, start: date, end: date) -> list[ExpenseRecord]:
        """Return records with ``start <= date <= end``, date descending."""
        ...


class InMemoryExpenseStore:
    """Dict-backed :class:`ExpenseStore` for tests and dry runs."""

    def __init__(self) -> None:
        self._records: dict[uuid.UUID, ExpenseRecord] = {}
        # Insertion sequence per id; breaks ties between equal dates.
        self._seq: dict[uuid.UUID, int] = {}
        self._next_seq = 0

    def __len__(self) -> int:
        return len(self._records)

    def insert(self, record: ExpenseRecord) -> None:
        if record.id in self._records:
            raise StoreError(f"Duplicate expense record id {record.id}")
        self._records[record.id] = record
        self._seq[record.id] = self._next_seq
        self._next_seq += 1

    def update(self, record_id: uuid.UUID, **fields: Any) -> ExpenseRecord:
        current = self._records.get(record_id)
        if current is None:
            raise RecordNotFoundError(record_id)
        updated = current.with_changes(**fields)
        self._records[record_id] = updated
        return updated

    def delete(self, record_id: uuid.UUID) -> None:
        if record_id not in self._records:
            raise RecordNotFoundError(record_id)
        del self._records[record_id]
        del self._seq[record_id]

    def get(self, record_id: uuid.UUID) -> ExpenseRecord | None:
        return self._records.get(record_id)

    def query_all(self) -> list[ExpenseRecord]:
        return self._sorted(self._records.values())

    def query_between(self, start: date, end: date) -> list[ExpenseRecord]:
        return self._sorted(r for r in self._records.values() if start <= r.date <= end)

    def _sorted(self, records) -> list[ExpenseRecord]:
        return sorted(records, key=lambda r: (r.date, self._seq[r.id]), reverse=True)


__all__ = ["ExpenseStore", "InMemoryExpenseStore"]
