"""Ingest utilities shared by CLI commands and workflows."""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from ..store import ExpenseStore
from .csv_import import CsvImportResult, import_csv


def read_csv_text(csv_path: str | PathLike[str]) -> str:
    """Read a ledger CSV as text.

    ``utf-8-sig`` drops a leading byte-order mark, which spreadsheet exports
    commonly add and which would otherwise defeat the header check on line 1.
    """

    return Path(csv_path).read_text(encoding="utf-8-sig")


def import_csv_file(csv_path: str | PathLike[str], store: ExpenseStore) -> CsvImportResult:
    """Read ``csv_path`` and run :func:`~.csv_import.import_csv` over it."""

    return import_csv(read_csv_text(csv_path), store)


__all__ = ["read_csv_text", "import_csv_file"]
