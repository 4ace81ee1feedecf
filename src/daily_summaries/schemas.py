from pydantic import BaseModel
from decimal import Decimal
from typing import List, Optional
import datetime as dt
from datetime import datetime


class DailySummaryInfo(BaseModel):
    id: int
    date: dt.date
    total_sales: Decimal
    total_expenses: Decimal
    balance: Decimal
    updated_at: Optional[datetime] = None


class DailySummaryListResponse(BaseModel):
    success: bool
    message: str
    data: List[DailySummaryInfo]
