from sqlmodel import SQLModel, Field, Column
from typing import Optional
import uuid
import sqlalchemy.dialects.postgresql as pg
from datetime import datetime, timezone

def utc_now():
    return datetime.now(timezone.utc)

class Customer(SQLModel, table=True):
    __tablename__ = "customers"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.user_id", index=True)
    name: str = Field(index=True)
    email: Optional[str] = None
    phone: Optional[str] = None

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(pg.TIMESTAMP(timezone=True))
    )
