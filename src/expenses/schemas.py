from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from datetime import datetime
from typing import Optional, List
import datetime as dt


class Expense(BaseModel):
    id: int
    date: dt.date
    category: str
    description: Optional[str] = None
    amount: Decimal
    created_at: Optional[datetime] = None

class ExpenseInput(BaseModel):
    date: dt.date
    category: str = Field(min_length=1)
    description: Optional[str] = None
    amount: Decimal = Field(max_digits=10, decimal_places=2)


class UpdateExpenseInput(BaseModel):
    date: Optional[dt.date] = None
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    @field_validator("date", "category", "amount")
    @classmethod
    def required_fields_not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class ExpenseResponse(BaseModel):
    success: bool
    message: str
    data: Expense


class ExpenseListResponse(BaseModel):
    success: bool
    message: str
    data: List[Expense]


class CategoryListResponse(BaseModel):
    success: bool
    message: str
    data: List[str]
