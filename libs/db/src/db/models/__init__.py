"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the expense ledger table used by ``expense_intake``.
"""

from .expenses import CATEGORY_LABELS, Base, ExpenseRow

__all__ = [
    "Base",
    "CATEGORY_LABELS",
    "ExpenseRow",
]
