from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Canonical category labels accepted by the CHECK constraint. Mirrors
# ``expense_intake.models.Category``; the db library does not import the
# application package.
CATEGORY_LABELS: tuple[str, ...] = (
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


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: et_expenses
# ---------------------------


class ExpenseRow(Base):
    __tablename__ = "et_expenses"

    # Surrogate key; its order doubles as insertion order for stable sorting of
    # records that share a date. SQLite only autoincrements INTEGER keys.
    row_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    # Application-level identifier (UUID text), immutable once written.
    record_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    is_business: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    note: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    location_from: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    location_to: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    # Receipt image fingerprint (SHA-256 hex) or ''. Not unique: duplicate
    # detection is not enforced yet.
    source_image_hash: Mapped[str] = mapped_column(
        String(64), nullable=False, server_default=text("''")
    )
    synced_to_sheets: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_et_expenses_amount_non_negative"),
        CheckConstraint(
            "category in (" + ", ".join(f"'{c}'" for c in CATEGORY_LABELS) + ")",
            name="ck_et_expenses_category",
        ),
    )


__all__ = [
    "Base",
    "CATEGORY_LABELS",
    "ExpenseRow",
]
