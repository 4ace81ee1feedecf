"""Dashboard statistics.

Everything here is computed live from the sales, expenses and customers
tables on every request; the daily_summaries cache is never consulted, so a
stale summary row cannot leak into the dashboard.
"""

from sqlmodel import select, func, desc
from sqlmodel.ext.asyncio.session import AsyncSession
from src.sales.models import Sale
from src.expenses.models import Expense
from src.customers.models import Customer
from src.sales.schemas import Sale as SaleSchema
from src.stats.schemas import DashboardStats, SalesTrendItem, MonthlyReport
from src.auth.services import AuthServices
from src.utils.money import to_money, to_float
from fastapi import HTTPException, status
from sqlalchemy.exc import DatabaseError
from collections import defaultdict
from decimal import Decimal
from typing import List, Optional, Tuple
import calendar
import datetime as dt
import logging
import uuid

authServices = AuthServices()
logger = logging.getLogger(__name__)

RECENT_SALES_LIMIT = 5


def month_bounds(day: dt.date) -> Tuple[dt.date, dt.date]:
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


class StatsServices:

    async def sum_sales(self, session: AsyncSession, user_uuid: uuid.UUID, start: dt.date, end: dt.date) -> Decimal:
        statement = select(func.sum(Sale.total)).where(
            Sale.user_id == user_uuid,
            Sale.date >= start,
            Sale.date <= end,
        )
        result = await session.exec(statement)
        return to_money(result.first())

    async def sum_expenses(self, session: AsyncSession, user_uuid: uuid.UUID, start: dt.date, end: dt.date) -> Decimal:
        statement = select(func.sum(Expense.amount)).where(
            Expense.user_id == user_uuid,
            Expense.date >= start,
            Expense.date <= end,
        )
        result = await session.exec(statement)
        return to_money(result.first())

    async def get_sales_trend(self, session: AsyncSession, user_uuid: uuid.UUID, start: dt.date, end: dt.date) -> List[SalesTrendItem]:
        # Days without sales are left out; the chart fills gaps itself.
        statement = (
            select(Sale.date, func.sum(Sale.total).label("amount"))
            .where(Sale.user_id == user_uuid, Sale.date >= start, Sale.date <= end)
            .group_by(Sale.date)
            .order_by(Sale.date)
        )
        result = await session.exec(statement)

        return [SalesTrendItem(date=row[0], amount=to_float(row[1])) for row in result.all()]

    async def get_dashboard_stats(self, session: AsyncSession, user_id: str, today: Optional[dt.date] = None) -> DashboardStats:
        """Headline figures for the dashboard as of ``today``.

        The year window runs from Jan 1 to ``today``. The month figures and
        ``sales_trend`` cover the whole calendar month, so sales dated later
        this month are already included.
        """
        user_uuid = await authServices.check_user_exists(user_id, session)
        today = today or dt.date.today()

        month_start, month_end = month_bounds(today)
        year_start = today.replace(month=1, day=1)

        try:
            today_sales = await self.sum_sales(session, user_uuid, today, today)
            today_expenses = await self.sum_expenses(session, user_uuid, today, today)
            month_sales = await self.sum_sales(session, user_uuid, month_start, month_end)
            month_expenses = await self.sum_expenses(session, user_uuid, month_start, month_end)
            year_sales = await self.sum_sales(session, user_uuid, year_start, today)
            year_expenses = await self.sum_expenses(session, user_uuid, year_start, today)

            customers_result = await session.exec(
                select(func.count(Customer.id)).where(Customer.user_id == user_uuid)
            )
            customer_count = customers_result.first() or 0

            # Same-day sales: most recently inserted first
            recent_result = await session.exec(
                select(Sale)
                .where(Sale.user_id == user_uuid)
                .order_by(desc(Sale.date), desc(Sale.id))
                .limit(RECENT_SALES_LIMIT)
            )
            recent_sales = [SaleSchema.model_validate(sale) for sale in recent_result.all()]

            sales_trend = await self.get_sales_trend(session, user_uuid, month_start, month_end)

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to compute dashboard stats for %s", user_uuid)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

        return DashboardStats(
            today_sales=to_float(today_sales),
            today_expenses=to_float(today_expenses),
            today_profit=to_float(today_sales - today_expenses),
            month_sales=to_float(month_sales),
            month_expenses=to_float(month_expenses),
            month_profit=to_float(month_sales - month_expenses),
            year_sales=to_float(year_sales),
            year_expenses=to_float(year_expenses),
            year_profit=to_float(year_sales - year_expenses),
            customer_count=customer_count,
            recent_sales=recent_sales,
            sales_trend=sales_trend,
        )

    async def get_monthly_report(self, session: AsyncSession, user_id: str, year: Optional[int] = None) -> List[MonthlyReport]:
        """Per-month totals for one calendar year, months without activity omitted."""
        user_uuid = await authServices.check_user_exists(user_id, session)
        year = year or dt.date.today().year

        start = dt.date(year, 1, 1)
        end = dt.date(year, 12, 31)

        # Grouped per day in SQL and rolled up to months here, which keeps
        # the query free of dialect-specific date formatting.
        sales_stmt = (
            select(Sale.date, func.sum(Sale.total), func.count(Sale.id))
            .where(Sale.user_id == user_uuid, Sale.date >= start, Sale.date <= end)
            .group_by(Sale.date)
        )
        expenses_stmt = (
            select(Expense.date, func.sum(Expense.amount), func.count(Expense.id))
            .where(Expense.user_id == user_uuid, Expense.date >= start, Expense.date <= end)
            .group_by(Expense.date)
        )

        try:
            sales_rows = (await session.exec(sales_stmt)).all()
            expense_rows = (await session.exec(expenses_stmt)).all()
        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to compute monthly report for %s", user_uuid)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

        sales_by_month = defaultdict(Decimal)
        expenses_by_month = defaultdict(Decimal)
        counts_by_month = defaultdict(int)

        for day, amount, count in sales_rows:
            key = day.strftime("%Y-%m")
            sales_by_month[key] += to_money(amount)
            counts_by_month[key] += count

        for day, amount, count in expense_rows:
            key = day.strftime("%Y-%m")
            expenses_by_month[key] += to_money(amount)
            counts_by_month[key] += count

        return [
            MonthlyReport(
                month=month,
                total_sales=to_float(sales_by_month[month]),
                total_expenses=to_float(expenses_by_month[month]),
                profit=to_float(sales_by_month[month] - expenses_by_month[month]),
                transaction_count=counts_by_month[month],
            )
            for month in sorted(counts_by_month)
        ]
