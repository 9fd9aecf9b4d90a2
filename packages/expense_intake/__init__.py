"""Public interface for the ``expense_intake`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    add_manual_expense,
    current_month_summary,
    delete_expense,
    import_csv_file,
    list_expenses,
    scan_receipt,
    scan_receipt_file,
    summarize_month,
)
from .ai_response import parse_ai_response
from .errors import (
    AiResponseError,
    AnalysisError,
    DecodeError,
    EmptyResponseError,
    ExpenseIntakeError,
    InvalidEditError,
    InvalidTransitionError,
    RecordNotFoundError,
    ReconcileError,
    StoreError,
    UnknownItemError,
)
from .ingest import CsvImportResult, CsvLineError, import_csv
from .models import Category, EditableBatchItem, ExpenseRecord, ParsedAiItem
from .reconcile import BatchReconciler, CommitResult
from .store import ExpenseStore, InMemoryExpenseStore

__all__ = [
    # API
    "import_csv",
    "import_csv_file",
    "parse_ai_response",
    "scan_receipt",
    "scan_receipt_file",
    "add_manual_expense",
    "list_expenses",
    "delete_expense",
    "summarize_month",
    "current_month_summary",
    # Models
    "Category",
    "ExpenseRecord",
    "ParsedAiItem",
    "EditableBatchItem",
    "CsvImportResult",
    "CsvLineError",
    "BatchReconciler",
    "CommitResult",
    "ExpenseStore",
    "InMemoryExpenseStore",
    # Errors
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
