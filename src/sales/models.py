from sqlmodel import SQLModel, Field, Column
from typing import Optional
from decimal import Decimal
import uuid
import datetime as dt
import sqlalchemy.dialects.postgresql as pg
from datetime import datetime, timezone

def utc_now():
    return datetime.now(timezone.utc)


class Sale(SQLModel, table=True):
    __tablename__ = "sales"

    id: Optional[int] = Field(default=None, primary_key=True)
    date: dt.date = Field(index=True)
    customer_id: Optional[int] = Field(default=None, foreign_key="customers.id", ondelete="SET NULL")
    # Free-text fallback for walk-in sales without a customer record
    customer_name: Optional[str] = None
    product: str
    quantity: int = Field(default=1, gt=0)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    # Supplied by the client, not recomputed from quantity * price
    total: Decimal = Field(max_digits=10, decimal_places=2)
    user_id: uuid.UUID = Field(foreign_key="users.user_id", index=True)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(pg.TIMESTAMP(timezone=True))
    )
