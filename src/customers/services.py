from src.customers.schemas import CustomerCreate, CustomerUpdate
from sqlmodel.ext.asyncio.session import AsyncSession
from src.customers.models import Customer
from src.sales.models import Sale
from sqlmodel import select, desc, col, or_
from fastapi import HTTPException, status
from sqlalchemy.exc import DatabaseError
from typing import Optional
import logging
import uuid
from src.auth.services import AuthServices

authServices = AuthServices()
logger = logging.getLogger(__name__)


class CustomerServices():

    async def get_owned_customer(self, customer_id: int, session: AsyncSession, user_uuid: uuid.UUID) -> Customer:
        # Another user's customer is reported exactly like a missing one.
        statement = select(Customer).where(Customer.id == customer_id, Customer.user_id == user_uuid)
        result = await session.exec(statement)
        customer = result.first()

        if not customer:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Customer not found"
            )

        return customer

    async def create_customer(self, customer: CustomerCreate, session: AsyncSession, user_id: str):
        # Verify the user exists in the system before allowing customer creation
        user_uuid = await authServices.check_user_exists(user_id, session)

        new_customer = Customer(**customer.model_dump(), user_id=user_uuid)

        session.add(new_customer)

        try:
            await session.commit()
            await session.refresh(new_customer)
            return new_customer
        except DatabaseError:
            # If anything fails, undo all changes to keep the data consistent
            await session.rollback()
            logger.exception("Failed to create customer")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create customer"
            )

    async def get_all_customers(self, session: AsyncSession, user_id: str, search: Optional[str] = None):
        user_uuid = await authServices.check_user_exists(user_id, session)

        statement = select(Customer).where(Customer.user_id == user_uuid)

        if search:
            pattern = f"%{search}%"
            statement = statement.where(
                or_(col(Customer.name).ilike(pattern), col(Customer.email).ilike(pattern))
            )

        statement = statement.order_by(desc(Customer.created_at), desc(Customer.id))

        try:
            result = await session.exec(statement)
            return result.all()

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to list customers")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def get_customer_by_id(self, customer_id: int, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            return await self.get_owned_customer(customer_id, session, user_uuid)

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to fetch customer %s", customer_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def update_customer(self, customer_id: int, update_data: CustomerUpdate, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        # Convert the input to a dictionary, excluding unset values
        update_dict = update_data.model_dump(exclude_unset=True)

        if not update_dict:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You must provide at least one field to update"
            )

        try:
            customer = await self.get_owned_customer(customer_id, session, user_uuid)

            for key, value in update_dict.items():
                setattr(customer, key, value)

            await session.commit()
            await session.refresh(customer)
            return customer

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to update customer %s", customer_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def delete_customer(self, customer_id: int, session: AsyncSession, user_id: str):
        user_uuid = await authServices.check_user_exists(user_id, session)

        try:
            customer = await self.get_owned_customer(customer_id, session, user_uuid)

            # Sales keep their free-text customer_name; only the reference goes.
            linked = await session.exec(
                select(Sale).where(Sale.customer_id == customer.id, Sale.user_id == user_uuid)
            )
            for sale in linked.all():
                sale.customer_id = None
                session.add(sale)

            await session.delete(customer)
            await session.commit()
            return True

        except DatabaseError:
            await session.rollback()
            logger.exception("Failed to delete customer %s", customer_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )
