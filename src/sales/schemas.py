from pydantic import BaseModel, ConfigDict, Field, field_validator
from decimal import Decimal
from datetime import datetime
from typing import Optional, List
import datetime as dt


class Sale(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    product: str
    quantity: int
    price: Decimal
    total: Decimal
    created_at: Optional[datetime] = None

class SaleInput(BaseModel):
    date: dt.date
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    product: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    total: Decimal = Field(max_digits=10, decimal_places=2)


class UpdateSaleInput(BaseModel):
    date: Optional[dt.date] = None
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    product: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[int] = Field(default=None, gt=0)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    total: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    @field_validator("date", "product", "quantity", "price", "total")
    @classmethod
    def required_fields_not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class SaleResponse(BaseModel):
    success: bool
    message: str
    data: Sale


class SaleListResponse(BaseModel):
    success: bool
    message: str
    data: List[Sale]
