from sqlmodel import SQLModel, Field, Column
from sqlalchemy import UniqueConstraint
from typing import Optional
from decimal import Decimal
import uuid
import datetime as dt
import sqlalchemy.dialects.postgresql as pg
from datetime import datetime, timezone

def utc_now():
    return datetime.now(timezone.utc)


class DailySummary(SQLModel, table=True):
    """Per-owner, per-day rollup of the sales and expenses ledgers.

    Derived data: every row can be rebuilt from ``sales.total`` and
    ``expenses.amount`` for the same owner and date.
    """
    __tablename__ = "daily_summaries"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_summary_user_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    date: dt.date = Field(index=True)
    total_sales: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    total_expenses: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    # total_sales - total_expenses, may be negative
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=10, decimal_places=2)
    user_id: uuid.UUID = Field(foreign_key="users.user_id", index=True)

    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(pg.TIMESTAMP(timezone=True))
    )
