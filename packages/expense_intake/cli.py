# ruff: noqa: I001
"""CLI for the ``expense_intake`` package.

This module exposes callable command handlers (``cmd_import_csv``,
``cmd_scan_receipt``, ...) and a Typer-based console interface. Environment
variables (``DATABASE_URL``, ``OPENAI_API_KEY``) are loaded from a local
``.env`` using ``python-dotenv`` before delegating to command logic. Business
logic lives in ``expense_intake.api`` and related modules.

Handlers print results to stdout, report failures as ``Error: ...`` on stderr
and return a process exit code.
"""

from __future__ import annotations

import sys
from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import load_settings
from .errors import ExpenseIntakeError
from .logging_setup import configure_logging
from .models import ExpenseRecord
from .store import ExpenseStore, InMemoryExpenseStore


# ---- Small module-level helpers used by CLI commands -------------------------


def _open_store(*, database_url: str | None, dry_run: bool) -> ExpenseStore:
    """Return the store for a command run.

    ``--dry-run`` uses a throwaway in-memory store; otherwise the SQL store is
    bound to ``--database-url`` or ``DATABASE_URL``.
    """

    if dry_run:
        return InMemoryExpenseStore()
    url = database_url or load_settings().database_url
    if not url:
        raise ExpenseIntakeError(
            "DATABASE_URL is not set (pass --database-url or use --dry-run)."
        )
    # Deferred import keeps SQLAlchemy off the dry-run path.
    from .persistence import SqlExpenseStore

    return SqlExpenseStore(url)


def _format_record(record: ExpenseRecord) -> str:
    business = "business" if record.is_business else ""
    return "\t".join(
        [
            str(record.id),
            record.date.isoformat(),
            record.title,
            str(record.amount),
            record.category.value,
            business,
        ]
    )


# ---- Command handlers ----------------------------------------------------------


def cmd_import_csv(csv_path: str, *, database_url: str | None = None, dry_run: bool = False) -> int:
    """Import a ledger CSV; row errors are reported but do not fail the run."""

    from .api import import_csv_file

    try:
        store = _open_store(database_url=database_url, dry_run=dry_run)
        result = import_csv_file(csv_path, store)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: CSV is not valid UTF-8: {e}", file=sys.stderr)
        return 1
    except ExpenseIntakeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Imported {result.success_count} expense(s).")
    for message in result.errors:
        print(message)
    return 0


def cmd_scan_receipt(
    image_path: str,
    *,
    database_url: str | None = None,
    dry_run: bool = False,
    assume_yes: bool = False,
) -> int:
    """Analyze a receipt image, review the batch interactively, then save it."""

    from .api import scan_receipt_file
    from .term_ui import review_batch

    if not load_settings().openai_api_key:
        print("Error: OPENAI_API_KEY is not set in the environment.", file=sys.stderr)
        return 1

    try:
        store = _open_store(database_url=database_url, dry_run=dry_run)
        outcome = scan_receipt_file(
            image_path,
            store,
            review=None if assume_yes else review_batch,
            on_progress=print,
        )
    except FileNotFoundError:
        print(f"Error: File not found: {image_path}", file=sys.stderr)
        return 1
    except ExpenseIntakeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if outcome.failure is not None:
        print(f"Error: {outcome.failure}", file=sys.stderr)
        return 1
    for r in outcome.results:
        if r.record is not None:
            print(_format_record(r.record))
        else:
            print(f"Error: item {r.item_id} was not saved: {r.error}", file=sys.stderr)
    return 0


def cmd_add(
    *,
    title: str,
    amount: int,
    category: str | None = None,
    expense_date: date | None = None,
    is_business: bool = False,
    note: str = "",
    database_url: str | None = None,
    dry_run: bool = False,
) -> int:
    """Record one expense entered by hand (category defaults to 食費)."""

    from .api import add_manual_expense
    from .models import Category
    from .term_ui import resolve_category_input

    resolved = Category.FOOD
    if category is not None:
        label = resolve_category_input(category)
        if label is None:
            print(f"Error: Unknown category: {category}", file=sys.stderr)
            return 1
        resolved = Category(label)

    try:
        store = _open_store(database_url=database_url, dry_run=dry_run)
        record = add_manual_expense(
            store,
            title=title,
            amount=amount,
            category=resolved,
            expense_date=expense_date,
            is_business=is_business,
            note=note,
        )
    except (ValueError, ExpenseIntakeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(_format_record(record))
    return 0


def cmd_list(*, database_url: str | None = None, dry_run: bool = False) -> int:
    from .api import list_expenses

    try:
        store = _open_store(database_url=database_url, dry_run=dry_run)
        records = list_expenses(store)
    except ExpenseIntakeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for record in records:
        print(_format_record(record))
    return 0


def cmd_summary(
    *,
    year: int | None = None,
    month: int | None = None,
    database_url: str | None = None,
    dry_run: bool = False,
) -> int:
    """Print the totals for one month (the current month by default)."""

    from .summary import month_bounds, summarize_month

    today = date.today()
    y = year if year is not None else today.year
    m = month if month is not None else today.month
    if not 1 <= m <= 12:
        print(f"Error: month must be 1-12, got {m}", file=sys.stderr)
        return 1

    try:
        store = _open_store(database_url=database_url, dry_run=dry_run)
        start, end = month_bounds(y, m)
        summary = summarize_month(store.query_between(start, end), y, m)
    except ExpenseIntakeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{summary.year:04d}-{summary.month:02d}")
    print(f"Total: {summary.total}")
    print(f"Business: {summary.business_total}")
    for entry in summary.by_category:
        print(f"{entry.category.value}\t{entry.amount}")
    return 0


def cmd_delete(record_id: str, *, database_url: str | None = None, dry_run: bool = False) -> int:
    from .api import delete_expense

    try:
        store = _open_store(database_url=database_url, dry_run=dry_run)
        delete_expense(store, record_id)
    except ValueError:
        print(f"Error: Invalid expense id: {record_id}", file=sys.stderr)
        return 1
    except ExpenseIntakeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Deleted {record_id}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Record household expenses from ledger CSV files and receipt images "
        "(OpenAI Responses API). Loads settings from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects these when used as default values below.
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
DRY_RUN_OPTION: OptionInfo = typer.Option(
    False, "--dry-run", help="Use a throwaway in-memory store instead of the database."
)


@app.command("import-csv")
def import_csv_cmd(
    csv_path: Annotated[
        Path,
        typer.Option(..., "--csv-path", help="Ledger CSV (yyyy/MM/dd,title,amount,category)."),
    ],
    *,
    database_url: str | None = DATABASE_URL_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Import a ledger CSV, one expense per line."""

    raise typer.Exit(cmd_import_csv(str(csv_path), database_url=database_url, dry_run=dry_run))


@app.command("scan-receipt")
def scan_receipt_cmd(
    image_path: Annotated[
        Path, typer.Option(..., "--image-path", help="Receipt or card statement image.")
    ],
    *,
    yes: bool = typer.Option(False, "--yes", "-y", help="Save every item without review."),
    database_url: str | None = DATABASE_URL_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Extract expenses from a receipt image and save them after review."""

    raise typer.Exit(
        cmd_scan_receipt(
            str(image_path), database_url=database_url, dry_run=dry_run, assume_yes=yes
        )
    )


@app.command("add")
def add_cmd(
    *,
    title: str = typer.Option(..., "--title", help="What the expense was for."),
    amount: int = typer.Option(..., "--amount", help="Whole currency units, >= 0."),
    category: str | None = typer.Option(
        None, "--category", help="Label, member name (e.g. food) or list number 1-9."
    ),
    on: datetime | None = typer.Option(
        None, "--date", formats=["%Y-%m-%d"], help="Expense date (default: today)."
    ),
    business: bool = typer.Option(False, "--business", help="Mark as a business expense."),
    note: str = typer.Option("", "--note", help="Optional memo."),
    database_url: str | None = DATABASE_URL_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Record one expense by hand."""

    raise typer.Exit(
        cmd_add(
            title=title,
            amount=amount,
            category=category,
            expense_date=on.date() if on is not None else None,
            is_business=business,
            note=note,
            database_url=database_url,
            dry_run=dry_run,
        )
    )


@app.command("list")
def list_cmd(
    *,
    database_url: str | None = DATABASE_URL_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """List stored expenses, newest first."""

    raise typer.Exit(cmd_list(database_url=database_url, dry_run=dry_run))


@app.command("summary")
def summary_cmd(
    *,
    year: int | None = typer.Option(None, "--year", help="Year (default: current)."),
    month: int | None = typer.Option(None, "--month", help="Month 1-12 (default: current)."),
    database_url: str | None = DATABASE_URL_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Show the monthly total, business total and per-category totals."""

    raise typer.Exit(
        cmd_summary(year=year, month=month, database_url=database_url, dry_run=dry_run)
    )


@app.command("delete")
def delete_cmd(
    *,
    record_id: str = typer.Option(..., "--id", help="Expense id as printed by `list`."),
    database_url: str | None = DATABASE_URL_OPTION,
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Delete one expense by id."""

    raise typer.Exit(cmd_delete(record_id, database_url=database_url, dry_run=dry_run))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m expense_intake.cli`
    app()
