from __future__ import annotations

import uuid
from datetime import date

import pytest

from expense_intake.api import add_manual_expense, delete_expense, list_expenses
from expense_intake.errors import RecordNotFoundError
from expense_intake.models import Category
from expense_intake.store import InMemoryExpenseStore


def test_manual_entry_defaults_to_food_and_today():
    store = InMemoryExpenseStore()
    rec = add_manual_expense(store, title="Onigiri", amount=150, today=lambda: date(2024, 7, 7))
    assert rec.category is Category.FOOD
    assert rec.date == date(2024, 7, 7)
    assert rec.is_business is False
    assert list_expenses(store) == [rec]


def test_manual_entry_with_all_fields():
    store = InMemoryExpenseStore()
    rec = add_manual_expense(
        store,
        title="Train",
        amount=480,
        category=Category.TRANSPORT,
        expense_date=date(2024, 7, 1),
        is_business=True,
        note="client visit",
        location_from="Shibuya",
        location_to="Shinagawa",
    )
    assert (rec.location_from, rec.location_to, rec.note) == ("Shibuya", "Shinagawa", "client visit")


@pytest.mark.parametrize(
    "title, amount, exc",
    [("", 100, ValueError), ("   ", 100, ValueError), ("Lunch", -1, ValueError)],
)
def test_manual_entry_validation(title, amount, exc):
    store = InMemoryExpenseStore()
    with pytest.raises(exc):
        add_manual_expense(store, title=title, amount=amount)
    assert len(store) == 0


def test_list_is_newest_first():
    store = InMemoryExpenseStore()
    add_manual_expense(store, title="old", amount=1, expense_date=date(2024, 1, 1))
    add_manual_expense(store, title="new", amount=1, expense_date=date(2024, 3, 1))
    assert [r.title for r in list_expenses(store)] == ["new", "old"]


def test_delete_accepts_uuid_or_string():
    store = InMemoryExpenseStore()
    a = add_manual_expense(store, title="a", amount=1)
    b = add_manual_expense(store, title="b", amount=1)
    delete_expense(store, a.id)
    delete_expense(store, str(b.id))
    assert list_expenses(store) == []

    with pytest.raises(RecordNotFoundError):
        delete_expense(store, uuid.uuid4())
    with pytest.raises(ValueError):
        delete_expense(store, "not-a-uuid")
