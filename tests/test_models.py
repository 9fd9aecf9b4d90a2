from __future__ import annotations

import uuid
from datetime import date, datetime

import pytest

from expense_intake.models import (
    CATEGORY_LABELS,
    MAX_AMOUNT,
    Category,
    EditableBatchItem,
    ExpenseRecord,
    ParsedAiItem,
    compute_image_fingerprint,
)


def test_category_labels_are_the_nine_wire_labels_in_order():
    assert CATEGORY_LABELS == (
        "食費",
        "生活・日用品",
        "交通費",
        "エンタメ",
        "健康・美容",
        "固定費",
        "自己投資",
        "特別支出",
        "その他",
    )
    assert all(c.label == c.value for c in Category)
    assert all(c.icon for c in Category)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("食費", Category.FOOD),
        ("交通費", Category.TRANSPORT),
        ("その他", Category.OTHER),
        ("Food", Category.OTHER),
        (" 食費", Category.OTHER),  # whitespace is not stripped here
        ("", Category.OTHER),
        (None, Category.OTHER),
        (3, Category.OTHER),
        (Category.HEALTH, Category.HEALTH),
    ],
)
def test_from_label_is_total(raw, expected):
    assert Category.from_label(raw) is expected


def test_record_defaults_and_fresh_ids():
    a = ExpenseRecord(date=date(2024, 1, 5), title="Coffee", amount=450)
    b = ExpenseRecord(date=date(2024, 1, 5), title="Coffee", amount=450)
    assert a.category is Category.OTHER
    assert a.is_business is False
    assert a.note == a.location_from == a.location_to == a.source_image_hash == ""
    assert a.synced_to_sheets is False
    assert isinstance(a.id, uuid.UUID)
    assert a.id != b.id


def test_record_accepts_zero_amount():
    assert ExpenseRecord(date=date(2024, 1, 5), title="Free", amount=0).amount == 0


def test_record_accepts_the_largest_storable_amount():
    record = ExpenseRecord(date=date(2024, 1, 5), title="Car", amount=MAX_AMOUNT)
    assert record.amount == MAX_AMOUNT


@pytest.mark.parametrize(
    "kwargs, exc",
    [
        ({"amount": -1}, ValueError),
        ({"amount": MAX_AMOUNT + 1}, ValueError),
        ({"amount": 1.5}, TypeError),
        ({"amount": True}, TypeError),
        ({"date": datetime(2024, 1, 5, 12, 0)}, TypeError),
        ({"date": "2024-01-05"}, TypeError),
        ({"category": "食費"}, TypeError),
        ({"title": None}, TypeError),
        ({"is_business": 1}, TypeError),
    ],
)
def test_record_validation(kwargs, exc):
    base = {"date": date(2024, 1, 5), "title": "x", "amount": 1}
    base.update(kwargs)
    with pytest.raises(exc):
        ExpenseRecord(**base)


def test_with_changes_keeps_id_and_revalidates():
    r = ExpenseRecord(date=date(2024, 1, 5), title="Coffee", amount=450)
    r2 = r.with_changes(amount=500, category=Category.FOOD)
    assert r2.id == r.id
    assert (r2.amount, r2.category) == (500, Category.FOOD)
    assert r.amount == 450  # original untouched

    with pytest.raises(ValueError):
        r.with_changes(amount=-5)
    with pytest.raises(ValueError):
        r.with_changes(id=uuid.uuid4())
    with pytest.raises(ValueError):
        r.with_changes(colour="red")


def test_parsed_item_is_strict_and_ignores_unknown_keys():
    item = ParsedAiItem.model_validate(
        {
            "date": "2024-03-01",
            "title": "Lunch",
            "amount": 980,
            "category": "食費",
            "is_business": False,
            "extra": "ignored",
        }
    )
    assert item.location_from is None and item.location_to is None

    with pytest.raises(ValueError):
        ParsedAiItem.model_validate(
            {
                "date": "2024-03-01",
                "title": "Lunch",
                "amount": "980",
                "category": "食費",
                "is_business": False,
            }
        )


def test_editable_item_from_parsed_assigns_unique_ids():
    parsed = ParsedAiItem(
        date="2024-03-01", title="Taxi", amount=1200, category="交通費", is_business=True
    )
    a = EditableBatchItem.from_parsed(parsed)
    b = EditableBatchItem.from_parsed(parsed)
    assert a.item_id != b.item_id
    assert (a.title, a.amount, a.category, a.is_business) == ("Taxi", 1200, "交通費", True)


def test_image_fingerprint_is_sha256_hex():
    fp = compute_image_fingerprint(b"abc")
    assert fp == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
