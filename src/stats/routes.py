from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession
from src.db.main import get_Session
from src.utils.auth import get_current_user
from src.stats.services import StatsServices
from src.stats.schemas import DashboardStats, MonthlyReport
from typing import List, Optional

stats_router = APIRouter()
stats_services = StatsServices()

@stats_router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard(
    session: AsyncSession = Depends(get_Session),
    current_user: dict = Depends(get_current_user)
):
    """Today, month and year totals, recent sales and this month's sales trend."""
    user_id = current_user.get("user_id")
    return await stats_services.get_dashboard_stats(session, user_id)

@stats_router.get("/monthly-report", response_model=List[MonthlyReport])
async def get_monthly_report(
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    session: AsyncSession = Depends(get_Session),
    current_user: dict = Depends(get_current_user)
):
    """Sales, expenses and profit per month of the given year (default: this year)."""
    user_id = current_user.get("user_id")
    return await stats_services.get_monthly_report(session, user_id, year)
