from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from db import metadata
from expense_intake.models import Category, ExpenseRecord
from expense_intake.persistence import SqlExpenseStore

_ROOT = Path(__file__).resolve().parents[1]


def _alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(_ROOT / "libs/db/alembic"))
    return cfg


def test_upgrade_creates_table_matching_orm(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.chdir(tmp_path)

    command.upgrade(_alembic_config(), "head")

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        cols = {c["name"] for c in insp.get_columns("et_expenses")}
        assert cols == {c.name for c in metadata.tables["et_expenses"].columns}
        assert "ix_et_expenses_date" in {i["name"] for i in insp.get_indexes("et_expenses")}
    finally:
        engine.dispose()

    store = SqlExpenseStore(url)

    rec = ExpenseRecord(date=date(2024, 5, 1), title="Lunch", amount=1200, category=Category.FOOD)
    store.insert(rec)
    assert store.query_all() == [rec]


def test_downgrade_drops_table(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    url = f"sqlite+pysqlite:///{tmp_path / 'down.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.chdir(tmp_path)
    cfg = _alembic_config()

    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    engine = create_engine(url)
    try:
        assert "et_expenses" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
