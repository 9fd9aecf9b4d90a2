from __future__ import annotations

import uuid
from datetime import date
from pathlib import Path

import pytest

from expense_intake.errors import RecordNotFoundError, StoreError
from expense_intake.models import Category, ExpenseRecord
from expense_intake.persistence import SqlExpenseStore
from expense_intake.store import ExpenseStore, InMemoryExpenseStore
from tests.helpers.db import bootstrap_sqlite_db, fetch_rows


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "expenses.db")


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> ExpenseStore:
    if request.param == "memory":
        return InMemoryExpenseStore()
    return SqlExpenseStore(bootstrap_sqlite_db(tmp_path / "expenses.db"))


def _rec(day: int, title: str, amount: int = 100, **kw) -> ExpenseRecord:
    return ExpenseRecord(date=date(2024, 5, day), title=title, amount=amount, **kw)


def test_stores_satisfy_the_protocol(store: ExpenseStore):
    assert isinstance(store, ExpenseStore)


def test_query_all_orders_newest_date_then_latest_insert(store: ExpenseStore):
    for r in [_rec(1, "a"), _rec(3, "b"), _rec(1, "c"), _rec(2, "d")]:
        store.insert(r)
    assert [r.title for r in store.query_all()] == ["b", "d", "c", "a"]


def test_query_between_is_inclusive(store: ExpenseStore):
    for day in (1, 10, 20, 31):
        store.insert(_rec(day, f"day{day}"))
    got = store.query_between(date(2024, 5, 10), date(2024, 5, 20))
    assert [r.title for r in got] == ["day20", "day10"]


def test_round_trip_preserves_every_field(store: ExpenseStore):
    original = _rec(
        5,
        "Shinkansen",
        14000,
        category=Category.TRANSPORT,
        is_business=True,
        note="trip",
        location_from="Tokyo",
        location_to="Osaka",
        source_image_hash="ab" * 32,
    )
    store.insert(original)
    assert store.query_all() == [original]


def test_update_revalidates_and_keeps_id(store: ExpenseStore):
    r = _rec(1, "Lunch", 900)
    store.insert(r)
    updated = store.update(r.id, amount=1000, category=Category.FOOD)
    assert updated.id == r.id
    assert store.query_all() == [updated]

    with pytest.raises(ValueError):
        store.update(r.id, amount=-1)
    assert store.query_all()[0].amount == 1000


def test_update_and_delete_unknown_ids(store: ExpenseStore):
    missing = uuid.uuid4()
    with pytest.raises(RecordNotFoundError):
        store.update(missing, title="x")
    with pytest.raises(RecordNotFoundError):
        store.delete(missing)


def test_delete(store: ExpenseStore):
    a, b = _rec(1, "a"), _rec(2, "b")
    store.insert(a)
    store.insert(b)
    store.delete(a.id)
    assert store.query_all() == [b]


def test_duplicate_insert_is_a_store_error(store: ExpenseStore):
    r = _rec(1, "a")
    store.insert(r)
    with pytest.raises(StoreError):
        store.insert(r)
    assert len(store.query_all()) == 1


def test_sql_rows_hold_wire_labels_and_uuid_text(db_url: str):
    store = SqlExpenseStore(db_url)
    r = _rec(1, "Coffee", category=Category.FOOD)
    store.insert(r)

    (row,) = fetch_rows(db_url)
    assert row.record_id == str(r.id)
    assert row.category == "食費"
    assert row.synced_to_sheets is False
    assert row.created_at is not None


def test_sql_insert_is_durable_across_store_instances(db_url: str):
    r = _rec(1, "Coffee")
    SqlExpenseStore(db_url).insert(r)
    assert SqlExpenseStore(db_url).get(r.id) == r


def test_sql_store_reads_database_url_from_env(db_url: str, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_URL", db_url)
    store = SqlExpenseStore()
    store.insert(_rec(1, "env"))
    assert [r.title for r in SqlExpenseStore(db_url).query_all()] == ["env"]


def test_sql_errors_are_wrapped(tmp_path: Path):
    # No schema was created in this database.
    store = SqlExpenseStore(f"sqlite+pysqlite:///{tmp_path / 'empty.db'}")
    with pytest.raises(StoreError) as excinfo:
        store.query_all()
    assert not isinstance(excinfo.value, RecordNotFoundError)


def _oversize(record: ExpenseRecord) -> ExpenseRecord:
    # Bypasses ExpenseRecord validation to reach the driver's own range check.
    object.__setattr__(record, "amount", 2**64)
    return record


def test_driver_range_errors_are_store_errors(db_url: str):
    store = SqlExpenseStore(db_url)
    with pytest.raises(StoreError):
        store.insert(_oversize(_rec(1, "big")))

    store.insert(_rec(2, "next"))
    assert [r.title for r in store.query_all()] == ["next"]
