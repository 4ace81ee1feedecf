from src.expenses.schemas import ExpenseInput, UpdateExpenseInput
from sqlmodel.ext.asyncio.session import AsyncSession
from src.expenses.models import Expense
from sqlmodel import select, desc, col, or_
from fastapi import HTTPException, status
from sqlalchemy.exc import DatabaseError
from typing import Optional
import logging
import uuid
from src.auth.services import AuthServices
from src.daily_summaries.services import DailySummaryServices

authServices = AuthServices()
dailySummaryServices = DailySummaryServices()
logger = logging.getLogger(__name__)


class ExpenseServices:

    async def get_owned_expense(self, expense_id: int, session: AsyncSession, user_uuid: uuid.UUID) -> Expense:
        statement = select(Expense).where(Expense.id == expense_id, Expense.user_id == user_uuid)
        result = await session.exec(statement)
        expense = result.first()

        if not expense:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Expense not found"
            )

        return expense

    async def create_expense(self, expense: ExpenseInput, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        new_expense = Expense(**expense.model_dump(), user_id=user_uuid)
        session.add(new_expense)

        try:
            await session.commit()
            await session.refresh(new_expense)

            await dailySummaryServices.sync_daily_summary(user_uuid, new_expense.date, session)
            return new_expense

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to create expense")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="failed to create expense"
            )

    async def get_all_expenses(self, session: AsyncSession, user_id: str, search: Optional[str] = None):
        user_uuid = await authServices.check_user_exists(user_id, session)

        statement = select(Expense).where(Expense.user_id == user_uuid)

        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(col(Expense.category).ilike(pattern), col(Expense.description).ilike(pattern))
            )

        statement = statement.order_by(desc(Expense.date), desc(Expense.id))

        try:
            result = await session.exec(statement)
            return result.all()

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to list expenses")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def get_expense_by_id(self, expense_id: int, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            return await self.get_owned_expense(expense_id, session, user_uuid)

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to fetch expense %s", expense_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def update_expense(self, expense_id: int, update_data: UpdateExpenseInput, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        update_dict = update_data.model_dump(exclude_unset=True)

        if not update_dict:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You must provide at least one field to update"
            )

        try:
            expense = await self.get_owned_expense(expense_id, session, user_uuid)
            old_date = expense.date

            for key, value in update_dict.items():
                setattr(expense, key, value)

            session.add(expense)
            await session.commit()
            await session.refresh(expense)

            await dailySummaryServices.sync_daily_summary(user_uuid, expense.date, session)
            if old_date != expense.date:
                await dailySummaryServices.sync_daily_summary(user_uuid, old_date, session)

            return expense

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to update expense %s", expense_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def delete_expense(self, expense_id: int, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            expense = await self.get_owned_expense(expense_id, session, user_uuid)
            expense_date = expense.date

            await session.delete(expense)
            await session.commit()

            await dailySummaryServices.sync_daily_summary(user_uuid, expense_date, session)
            return True

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to delete expense %s", expense_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )
