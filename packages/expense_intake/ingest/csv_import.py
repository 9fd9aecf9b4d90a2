"""Line-oriented import of the household-ledger CSV format.

Format (one expense per line, no header required)::

    yyyy/MM/dd,title,amount,category

Contract
--------
- Lines are processed in file order and numbered from 1 (universal newlines).
- Blank lines and lines whose trimmed text starts with ``日付`` or ``date``
  (case-sensitive) are skipped as headers. The check is a plain prefix match,
  so a data row starting with either token is skipped too.
- Fields are split on ``,`` with no quoting or escaping. A comma inside a
  title shifts the remaining columns; that is a property of the format.
- A line needs at least 4 columns; extra columns are ignored.
- Column 0 must parse with ``%Y/%m/%d``; column 2 must be an optional sign
  followed by ASCII digits, at least 0 and at most :data:`MAX_AMOUNT`.
- Column 1 becomes the title verbatim; column 3 is trimmed and mapped through
  :meth:`Category.from_label` (unknown labels become ``その他``).
- Every valid line is inserted into the store immediately, before the next
  line is read. Invalid lines are reported as :class:`CsvLineError` values and
  never stop the import.

Store failures are not row errors: an exception from ``store.insert``
propagates to the caller with every earlier valid row already inserted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from ..logging_setup import get_logger
from ..models import MAX_AMOUNT, Category, ExpenseRecord
from ..store import ExpenseStore

HEADER_TOKENS: tuple[str, ...] = ("日付", "date")
DATE_FORMAT = "%Y/%m/%d"
MIN_COLUMNS = 4

_AMOUNT_RE = re.compile(r"[+-]?[0-9]+")

_logger = get_logger("expense_intake.ingest.csv_import")

type CsvErrorKind = Literal["format", "date", "amount"]


@dataclass(frozen=True, slots=True)
class CsvLineError:
    """A rejected CSV line.

    ``kind`` names the defect (``format``: too few columns, ``date``: bad
    date column, ``amount``: non-integer or negative amount column) and
    ``value`` carries the offending column text when there is one.
    """

    line_number: int
    kind: CsvErrorKind
    value: str | None = None

    @property
    def message(self) -> str:
        if self.kind == "format":
            return f"{self.line_number}行目: フォーマット不正 (カラム不足)"
        if self.kind == "date":
            return f"{self.line_number}行目: 日付形式エラー ({self.value})"
        return f"{self.line_number}行目: 金額エラー ({self.value})"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class CsvImportResult:
    """Outcome of one import: inserted records plus per-line errors."""

    records: list[ExpenseRecord] = field(default_factory=list)
    line_errors: list[CsvLineError] = field(default_factory=list)
    skipped_lines: int = 0

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def errors(self) -> list[str]:
        """Human-readable error messages, one per rejected line, in line order."""

        return [e.message for e in self.line_errors]


def is_skippable(line: str) -> bool:
    """Return True for blank lines and header lines (prefix heuristic)."""

    trimmed = line.strip()
    return not trimmed or trimmed.startswith(HEADER_TOKENS)


def _parse_date(raw: str) -> date | None:
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        return None


def _parse_amount(raw: str) -> int | None:
    # ``int()`` would also accept surrounding whitespace and ``_`` separators.
    if not _AMOUNT_RE.fullmatch(raw):
        return None
    value = int(raw)
    return value if 0 <= value <= MAX_AMOUNT else None


def parse_csv_line(line: str, line_number: int) -> ExpenseRecord | CsvLineError:
    """Validate one non-skipped line into a record or a line error.

    Checks run in column order (count, date, amount) and stop at the first
    failure, so each rejected line yields exactly one error.
    """

    columns = line.strip().split(",")
    if len(columns) < MIN_COLUMNS:
        return CsvLineError(line_number, "format")

    parsed_date = _parse_date(columns[0])
    if parsed_date is None:
        return CsvLineError(line_number, "date", columns[0])

    amount = _parse_amount(columns[2])
    if amount is None:
        return CsvLineError(line_number, "amount", columns[2])

    return ExpenseRecord(
        date=parsed_date,
        title=columns[1],
        amount=amount,
        category=Category.from_label(columns[3].strip()),
        is_business=False,
    )


def import_csv(text: str, store: ExpenseStore) -> CsvImportResult:
    """Validate ``text`` line by line, inserting each valid row as it is read.

    Returns a :class:`CsvImportResult` whose ``success_count`` plus the number
    of ``errors`` equals the number of non-skipped lines.
    """

    result = CsvImportResult()
    for index, line in enumerate(text.splitlines()):
        line_number = index + 1
        if is_skippable(line):
            result.skipped_lines += 1
            continue

        outcome = parse_csv_line(line, line_number)
        if isinstance(outcome, CsvLineError):
            _logger.debug("Rejected CSV line: %s", outcome.message)
            result.line_errors.append(outcome)
            continue

        store.insert(outcome)
        result.records.append(outcome)

    _logger.info(
        "CSV import finished: %d inserted, %d rejected, %d skipped",
        result.success_count,
        len(result.line_errors),
        result.skipped_lines,
    )
    return result


__all__ = [
    "HEADER_TOKENS",
    "CsvLineError",
    "CsvImportResult",
    "is_skippable",
    "parse_csv_line",
    "import_csv",
]
