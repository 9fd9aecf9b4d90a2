"""Monthly spending summaries for the dashboard view."""

from __future__ import annotations

import calendar
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date

from .models import Category, ExpenseRecord
from .store import ExpenseStore


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    category: Category
    amount: int


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    """Totals for one calendar month.

    ``by_category`` lists only categories with at least one record, largest
    amount first; equal amounts keep :class:`Category` declaration order.
    """

    year: int
    month: int
    total: int
    business_total: int
    by_category: tuple[CategoryTotal, ...]
    record_count: int


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return the first and last day of ``year``/``month`` (inclusive)."""

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def summarize_month(records: Iterable[ExpenseRecord], year: int, month: int) -> MonthlySummary:
    """Aggregate the records that fall in ``year``/``month``; others are ignored."""

    start, end = month_bounds(year, month)
    in_month = [r for r in records if start <= r.date <= end]

    per_category: dict[Category, int] = {}
    for r in in_month:
        per_category[r.category] = per_category.get(r.category, 0) + r.amount

    order = {c: i for i, c in enumerate(Category)}
    by_category = tuple(
        CategoryTotal(category=c, amount=a)
        for c, a in sorted(per_category.items(), key=lambda kv: (-kv[1], order[kv[0]]))
    )
    return MonthlySummary(
        year=year,
        month=month,
        total=sum(r.amount for r in in_month),
        business_total=sum(r.amount for r in in_month if r.is_business),
        by_category=by_category,
        record_count=len(in_month),
    )


def current_month_summary(
    store: ExpenseStore, *, today: Callable[[], date] = date.today
) -> MonthlySummary:
    """Summarize the calendar month containing ``today()``."""

    d = today()
    start, end = month_bounds(d.year, d.month)
    return summarize_month(store.query_between(start, end), d.year, d.month)


__all__ = [
    "CategoryTotal",
    "MonthlySummary",
    "month_bounds",
    "summarize_month",
    "current_month_summary",
]
