"""Exception hierarchy for ``expense_intake``.

Row-level CSV defects are not exceptions; they are collected as
:class:`~expense_intake.ingest.csv_import.CsvLineError` values so that one bad
line never aborts an import. Everything that *is* raised derives from
:class:`ExpenseIntakeError` so callers (the CLI in particular) can catch the
package's failures without also catching programming errors.
"""

from __future__ import annotations


class ExpenseIntakeError(Exception):
    """Base class for all errors raised by this package."""


# ---------------------------------------------------------------------------
# AI response decoding
# ---------------------------------------------------------------------------


class AiResponseError(ExpenseIntakeError):
    """The AI backend returned text that cannot become a batch."""


class EmptyResponseError(AiResponseError):
    """The AI backend returned no text (``None``, empty or whitespace only)."""

    def __init__(self, message: str = "AI response was empty") -> None:
        super().__init__(message)


class DecodeError(AiResponseError):
    """The cleaned AI text is not a JSON array of receipt line items.

    ``raw_text`` keeps the original, uncleaned text for diagnostics and
    ``reason`` carries the decoder's explanation.
    """

    def __init__(self, raw_text: str, reason: str) -> None:
        super().__init__(f"Failed to decode AI response: {reason}")
        self.raw_text = raw_text
        self.reason = reason


class AnalysisError(ExpenseIntakeError):
    """The call to the image-analysis backend itself failed."""


# ---------------------------------------------------------------------------
# Batch reconciliation
# ---------------------------------------------------------------------------


class ReconcileError(ExpenseIntakeError):
    """Base class for editable-batch failures."""


class InvalidTransitionError(ReconcileError):
    """An operation was attempted from a state that does not permit it."""

    def __init__(self, operation: str, state: str) -> None:
        super().__init__(f"Cannot {operation} while batch is {state}")
        self.operation = operation
        self.state = state


class UnknownItemError(ReconcileError, KeyError):
    """No item with the given identifier exists in the batch."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"No batch item with id {item_id!r}")
        self.item_id = item_id

    def __str__(self) -> str:  # KeyError would repr() the message
        return str(self.args[0])


class InvalidEditError(ReconcileError, ValueError):
    """An edit named an unknown field or supplied a value of the wrong type."""


# ---------------------------------------------------------------------------
# Store adapter
# ---------------------------------------------------------------------------


class StoreError(ExpenseIntakeError):
    """The persistent store failed to perform an operation."""


class RecordNotFoundError(StoreError, KeyError):
    """``update``/``delete`` addressed a record id the store does not hold."""

    def __init__(self, record_id: object) -> None:
        super().__init__(f"No expense record with id {record_id!s}")
        self.record_id = record_id

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "ExpenseIntakeError",
    "AiResponseError",
    "EmptyResponseError",
    "DecodeError",
    "AnalysisError",
    "ReconcileError",
    "InvalidTransitionError",
    "UnknownItemError",
    "InvalidEditError",
    "StoreError",
    "RecordNotFoundError",
]
