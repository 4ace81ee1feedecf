from pydantic import BaseModel
from typing import List
import datetime as dt
from src.sales.schemas import Sale


class SalesTrendItem(BaseModel):
    date: dt.date
    amount: float


class DashboardStats(BaseModel):
    today_sales: float
    today_expenses: float
    today_profit: float
    month_sales: float
    month_expenses: float
    month_profit: float
    year_sales: float
    year_expenses: float
    year_profit: float
    customer_count: int
    recent_sales: List[Sale]
    sales_trend: List[SalesTrendItem]


class MonthlyReport(BaseModel):
    month: str
    total_sales: float
    total_expenses: float
    profit: float
    transaction_count: int
