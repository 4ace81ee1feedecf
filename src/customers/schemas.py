from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None

class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value):
        if value is None:
            raise ValueError("name cannot be null")
        return value

class CustomerInfo(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

class CustomerResponse(BaseModel):
    success: bool
    message: str
    data: CustomerInfo

class CustomerListResponse(BaseModel):
    success: bool
    message: str
    data: List[CustomerInfo]
