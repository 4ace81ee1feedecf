from sqlmodel import SQLModel, Field, Column
from typing import Optional
from decimal import Decimal
import uuid
import datetime as dt
import sqlalchemy.dialects.postgresql as pg
from datetime import datetime, timezone

def utc_now():
    return datetime.now(timezone.utc)

# Offered by the UI; the API accepts any category string.
SUGGESTED_CATEGORIES = [
    "Rent",
    "Utilities",
    "Salaries",
    "Inventory",
    "Marketing",
    "Software",
    "Office Supplies",
    "Travel",
    "Other",
]


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: dt.date = Field(index=True)
    category: str
    description: Optional[str] = None
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    user_id: uuid.UUID = Field(foreign_key="users.user_id", index=True)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(pg.TIMESTAMP(timezone=True))
    )
