"""Daily summary synchronization.

The ``daily_summaries`` table is a cache over the sales and expenses
ledgers. It is kept current by recomputing a single (owner, date) row every
time a sale or expense on that date is written, and can be rebuilt for all
of an owner's dates with ``sync_all_daily_summaries``.

Callers commit their ledger change first and then call
``sync_daily_summary``; the sync commits on its own. Errors are not caught
here so they fail the mutation that triggered them.
"""

from sqlmodel import select, func, desc
from sqlmodel.ext.asyncio.session import AsyncSession
from src.daily_summaries.models import DailySummary, utc_now
from src.sales.models import Sale
from src.expenses.models import Expense
from src.utils.money import to_money
from fastapi import HTTPException, status
from sqlalchemy.exc import DatabaseError
from sqlalchemy.dialects import postgresql, sqlite
from src.auth.services import AuthServices
from typing import List
import datetime as dt
import logging
import uuid

authServices = AuthServices()
logger = logging.getLogger(__name__)

# INSERT ... ON CONFLICT DO UPDATE for the supported backends
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class DailySummaryServices:

    async def sync_daily_summary(self, user_uuid: uuid.UUID, summary_date: dt.date, session: AsyncSession) -> None:
        """Recompute the rollup row for one owner and calendar date.

        Writes the row as a single upsert on ``uq_daily_summary_user_date``,
        so the first sync of a date inserts it and later syncs (including
        after every ledger row for the date is gone) overwrite it. Two
        requests racing on a new date both succeed and the last one to
        commit wins.
        """
        sales_stmt = select(func.sum(Sale.total)).where(
            Sale.user_id == user_uuid,
            Sale.date == summary_date,
        )
        expenses_stmt = select(func.sum(Expense.amount)).where(
            Expense.user_id == user_uuid,
            Expense.date == summary_date,
        )

        sales_result = await session.exec(sales_stmt)
        expenses_result = await session.exec(expenses_stmt)

        total_sales = to_money(sales_result.first())
        total_expenses = to_money(expenses_result.first())
        balance = total_sales - total_expenses

        conn = await session.connection()
        insert = UPSERT_INSERTS[conn.dialect.name]

        statement = insert(DailySummary).values(
            date=summary_date,
            total_sales=total_sales,
            total_expenses=total_expenses,
            balance=balance,
            user_id=user_uuid,
            updated_at=utc_now(),
        )
        statement = statement.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={
                "total_sales": statement.excluded.total_sales,
                "total_expenses": statement.excluded.total_expenses,
                "balance": statement.excluded.balance,
                "updated_at": statement.excluded.updated_at,
            },
        )
        await conn.execute(statement)
        await session.commit()

        # the upsert bypasses the identity map; refresh any loaded copy
        refreshed = await session.exec(
            select(DailySummary)
            .where(DailySummary.user_id == user_uuid, DailySummary.date == summary_date)
            .execution_options(populate_existing=True)
        )
        refreshed.first()

        logger.debug(
            "Synced daily summary for %s on %s: sales=%s expenses=%s balance=%s",
            user_uuid, summary_date, total_sales, total_expenses, balance
        )

    async def get_ledger_dates(self, user_uuid: uuid.UUID, session: AsyncSession) -> List[dt.date]:
        """Distinct dates that carry at least one sale or expense, ascending."""
        sale_dates = await session.exec(
            select(Sale.date).where(Sale.user_id == user_uuid).distinct()
        )
        expense_dates = await session.exec(
            select(Expense.date).where(Expense.user_id == user_uuid).distinct()
        )

        return sorted(set(sale_dates.all()) | set(expense_dates.all()))

    async def sync_all_daily_summaries(self, user_uuid: uuid.UUID, session: AsyncSession) -> None:
        dates = await self.get_ledger_dates(user_uuid, session)

        for summary_date in dates:
            await self.sync_daily_summary(user_uuid, summary_date, session)

        logger.info("Rebuilt %d daily summaries for %s", len(dates), user_uuid)

    async def list_summaries(self, user_uuid: uuid.UUID, session: AsyncSession):
        statement = (
            select(DailySummary)
            .where(DailySummary.user_id == user_uuid)
            .order_by(desc(DailySummary.date))
        )
        result = await session.exec(statement)
        return result.all()

    async def get_daily_summaries(self, session: AsyncSession, user_id: str):
        """List the owner's summaries, newest first.

        An owner with ledger rows but no summaries yet (data written before
        summaries existed) gets a one-off backfill before the list is read.
        """
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            summaries = await self.list_summaries(user_uuid, session)

            if not summaries:
                await self.sync_all_daily_summaries(user_uuid, session)
                summaries = await self.list_summaries(user_uuid, session)

            return summaries

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to load daily summaries for %s", user_uuid)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )
