from src.sales.schemas import SaleInput, UpdateSaleInput
from sqlmodel.ext.asyncio.session import AsyncSession
from src.sales.models import Sale
from sqlmodel import select, desc, col, or_
from fastapi import HTTPException, status
from sqlalchemy.exc import DatabaseError
from typing import Optional
import logging
import uuid
from src.auth.services import AuthServices
from src.customers.services import CustomerServices
from src.daily_summaries.services import DailySummaryServices

authServices = AuthServices()
customerServices = CustomerServices()
dailySummaryServices = DailySummaryServices()
logger = logging.getLogger(__name__)


class SaleServices:

    async def get_owned_sale(self, sale_id: int, session: AsyncSession, user_uuid: uuid.UUID) -> Sale:
        statement = select(Sale).where(Sale.id == sale_id, Sale.user_id == user_uuid)
        result = await session.exec(statement)
        sale = result.first()

        if not sale:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Sale not found"
            )

        return sale

    async def resolve_customer(self, sale_dict: dict, session: AsyncSession, user_uuid: uuid.UUID):
        """Check a referenced customer belongs to the owner.

        When no customer name was sent, the customer's current name is copied
        onto the sale so the row still reads correctly if the customer is
        deleted later.
        """
        customer_id = sale_dict.get("customer_id")
        if customer_id is None:
            return

        customer = await customerServices.get_owned_customer(customer_id, session, user_uuid)

        if not sale_dict.get("customer_name"):
            sale_dict["customer_name"] = customer.name

    async def create_sale(self, sale: SaleInput, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        sale_dict = sale.model_dump()
        await self.resolve_customer(sale_dict, session, user_uuid)

        new_sale = Sale(**sale_dict, user_id=user_uuid)
        session.add(new_sale)

        try:
            await session.commit()
            await session.refresh(new_sale)

            await dailySummaryServices.sync_daily_summary(user_uuid, new_sale.date, session)
            return new_sale

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to create sale")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="failed to create sale"
            )

    async def get_all_sales(self, session: AsyncSession, user_id: str, search: Optional[str] = None):
        user_uuid = await authServices.check_user_exists(user_id, session)

        statement = select(Sale).where(Sale.user_id == user_uuid)

        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(col(Sale.product).ilike(pattern), col(Sale.customer_name).ilike(pattern))
            )

        statement = statement.order_by(desc(Sale.date), desc(Sale.id))

        try:
            result = await session.exec(statement)
            return result.all()

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to list sales")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def get_sale_by_id(self, sale_id: int, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            return await self.get_owned_sale(sale_id, session, user_uuid)

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to fetch sale %s", sale_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def update_sale(self, sale_id: int, update_data: UpdateSaleInput, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        update_dict = update_data.model_dump(exclude_unset=True)

        if not update_dict:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You must provide at least one field to update"
            )

        try:
            sale = await self.get_owned_sale(sale_id, session, user_uuid)
            await self.resolve_customer(update_dict, session, user_uuid)

            old_date = sale.date

            for key, value in update_dict.items():
                setattr(sale, key, value)

            session.add(sale)
            await session.commit()
            await session.refresh(sale)

            await dailySummaryServices.sync_daily_summary(user_uuid, sale.date, session)
            if old_date != sale.date:
                # The sale moved away, so the old day must drop it.
                await dailySummaryServices.sync_daily_summary(user_uuid, old_date, session)

            return sale

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to update sale %s", sale_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def delete_sale(self, sale_id: int, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            sale = await self.get_owned_sale(sale_id, session, user_uuid)
            sale_date = sale.date

            await session.delete(sale)
            await session.commit()

            await dailySummaryServices.sync_daily_summary(user_uuid, sale_date, session)
            return True

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to delete sale %s", sale_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )
