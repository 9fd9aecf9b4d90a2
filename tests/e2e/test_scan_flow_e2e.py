# ruff: noqa: I001
from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

import pytest

import expense_intake.receipt_analyzer as analyzer_mod
from expense_intake.api import scan_receipt_file
from expense_intake.models import Category, compute_image_fingerprint
from expense_intake.persistence import SqlExpenseStore
from expense_intake.reconcile import BatchReconciler

from tests.helpers.db import bootstrap_sqlite_db, fetch_rows
from tests.helpers.openai_stub import OpenAIStub, items_json

TODAY = date(2024, 6, 30)

RECEIPT_ITEMS = (
    {
        "date": "2024-06-28",
        "title": "Shinkansen Tokyo-Osaka",
        "amount": 14720,
        "category": "交通費",
        "is_business": True,
        "location_from": "Tokyo",
        "location_to": "Shin-Osaka",
    },
    {
        "date": "28/06/2024",  # model ignored the date format
        "title": "Bento",
        "amount": 1100,
        "category": "食費",
        "is_business": False,
        "location_from": None,
        "location_to": "Station kiosk",
    },
    {
        "date": "2024-06-28",
        "title": "Coffee",
        "amount": 380,
        "category": "Cafe",  # not a known label
        "is_business": False,
    },
)


def test_e2e_scan_review_and_persist(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    # -------------------------
    # DB bootstrap + image fixture
    # -------------------------
    db_url = bootstrap_sqlite_db(tmp_path / "scan-e2e.db")
    image = tmp_path / "receipt.jpg"
    image_bytes = b"\xff\xd8\xff\xe0fake-jpeg"
    image.write_bytes(image_bytes)

    # -------------------------
    # Stub the OpenAI client used inside receipt_analyzer.py
    # -------------------------
    calls: list[dict[str, Any]] = []
    reply = items_json(*RECEIPT_ITEMS, fenced=True)
    monkeypatch.setattr(analyzer_mod, "OpenAI", lambda: OpenAIStub(reply, calls))

    # -------------------------
    # Review: fix the bento's category and drop the coffee
    # -------------------------
    def review(rec: BatchReconciler) -> bool:
        train, bento, coffee = rec.items
        rec.edit(bento.item_id, is_business=True)
        rec.delete(coffee.item_id)
        return True

    progress: list[str] = []
    outcome = scan_receipt_file(
        image,
        SqlExpenseStore(db_url),
        review=review,
        today=lambda: TODAY,
        on_progress=progress.append,
    )

    # -------------------------
    # Assertions
    # -------------------------
    assert outcome.failure is None
    assert outcome.inserted_count == 2
    assert len(calls) == 1
    assert progress[-1] == "Saved 2 of 2 item(s)."

    rows = fetch_rows(db_url)
    assert [r.title for r in rows] == ["Shinkansen Tokyo-Osaka", "Bento"]
    train, bento = rows
    assert (train.date, train.category, train.is_business) == (date(2024, 6, 28), "交通費", True)
    assert (train.location_from, train.location_to) == ("Tokyo", "Shin-Osaka")
    assert (bento.date, bento.is_business, bento.location_from) == (TODAY, True, "")
    assert {r.source_image_hash for r in rows} == {compute_image_fingerprint(image_bytes)}

    records = SqlExpenseStore(db_url).query_all()
    assert {r.category for r in records} == {Category.TRANSPORT, Category.FOOD}


def test_e2e_declined_review_writes_nothing(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    db_url = bootstrap_sqlite_db(tmp_path / "scan-e2e.db")
    image = tmp_path / "receipt.jpg"
    image.write_bytes(b"img")
    monkeypatch.setattr(analyzer_mod, "OpenAI", lambda: OpenAIStub(items_json(*RECEIPT_ITEMS)))

    outcome = scan_receipt_file(image, SqlExpenseStore(db_url), review=lambda rec: False)

    assert outcome.cancelled is True
    assert fetch_rows(db_url) == []


def test_e2e_unknown_category_without_review_is_other(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
):
    db_url = bootstrap_sqlite_db(tmp_path / "scan-e2e.db")
    image = tmp_path / "receipt.jpg"
    image.write_bytes(b"img")
    monkeypatch.setattr(analyzer_mod, "OpenAI", lambda: OpenAIStub(items_json(RECEIPT_ITEMS[2])))

    outcome = scan_receipt_file(image, SqlExpenseStore(db_url), today=lambda: TODAY)

    assert outcome.inserted_count == 1
    (row,) = fetch_rows(db_url)
    assert row.category == "その他"
