# ruff: noqa: I001
"""Expense ledger table.

Revision ID: 0001_et_expenses
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_et_expenses"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


# Mirrors db.models.expenses.CATEGORY_LABELS at the time of this revision.
_CATEGORY_LABELS = (
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


def upgrade() -> None:
    op.create_table(
        "et_expenses",
        sa.Column(
            "row_id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("record_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("is_business", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("note", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("location_from", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("location_to", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "source_image_hash",
            sa.String(length=64),
            nullable=False,
            server_default=sa.text("''"),
        ),
        sa.Column(
            "synced_to_sheets", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("record_id", name="uq_et_expenses_record_id"),
        sa.CheckConstraint("amount >= 0", name="ck_et_expenses_amount_non_negative"),
        sa.CheckConstraint(
            "category in (" + ", ".join(f"'{c}'" for c in _CATEGORY_LABELS) + ")",
            name="ck_et_expenses_category",
        ),
    )
    op.create_index("ix_et_expenses_date", "et_expenses", ["date"])


def downgrade() -> None:
    op.drop_index("ix_et_expenses_date", table_name="et_expenses")
    op.drop_table("et_expenses")
