from fastapi import APIRouter, Depends, Request, Response, status
from src.utils.auth import get_current_user
from src.expenses.schemas import (
    ExpenseInput, ExpenseResponse, ExpenseListResponse,
    UpdateExpenseInput, CategoryListResponse,
)
from src.expenses.services import ExpenseServices
from src.expenses.models import SUGGESTED_CATEGORIES
from sqlmodel.ext.asyncio.session import AsyncSession
from src.db.main import get_Session
from src.utils.limiter import limiter
from typing import Optional


expense_router = APIRouter()
expense_services = ExpenseServices()


@expense_router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_expense(
    request: Request,
    response: Response,
    expense: ExpenseInput,
    session: AsyncSession = Depends(get_Session),
    user_details: dict = Depends(get_current_user)
):
    user_id = user_details.get("user_id")

    new_expense = await expense_services.create_expense(expense, session, user_id)

    return {
        "success": True,
        "message": "expense created successfully",
        "data": new_expense
    }


@expense_router.get("", response_model=ExpenseListResponse, status_code=status.HTTP_200_OK)
@limiter.limit("100/minute")
async def get_all_expenses(
    request: Request,
    response: Response,
    search: Optional[str] = None,
    session: AsyncSession = Depends(get_Session),
    user_details: dict = Depends(get_current_user)
):
    user_id = user_details.get("user_id")

    expenses = await expense_services.get_all_expenses(session, user_id, search)

    return {
        "success": True,
        "message": "expenses fetched successfully",
        "data": expenses
    }


@expense_router.get("/categories", response_model=CategoryListResponse, status_code=status.HTTP_200_OK)
async def get_expense_categories(
    user_details: dict = Depends(get_current_user)
):
    """Suggested categories for the expense form. Any other string is accepted too."""
    return {
        "success": True,
        "message": "expense categories fetched successfully",
        "data": SUGGESTED_CATEGORIES
    }


@expense_router.get("/{id}", response_model=ExpenseResponse, status_code=status.HTTP_200_OK)
@limiter.limit("100/minute")
async def get_expense(
    request: Request,
    response: Response,
    id: int,
    session: AsyncSession = Depends(get_Session),
    user_details: dict = Depends(get_current_user)
):
    user_id = user_details.get("user_id")

    expense = await expense_services.get_expense_by_id(id, session, user_id)

    return {
        "success": True,
        "message": "expense fetched successfully",
        "data": expense
    }


@expense_router.put("/{id}", response_model=ExpenseResponse, status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def update_expense(
    request: Request,
    response: Response,
    id: int,
    update_data: UpdateExpenseInput,
    session: AsyncSession = Depends(get_Session),
    user_details: dict = Depends(get_current_user)
):
    user_id = user_details.get("user_id")

    expense = await expense_services.update_expense(id, update_data, session, user_id)

    return {
        "success": True,
        "message": "expense updated successfully",
        "data": expense
    }


@expense_router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("30/minute")
async def delete_expense(
    request: Request,
    response: Response,
    id: int,
    session: AsyncSession = Depends(get_Session),
    user_details: dict = Depends(get_current_user)
):
    user_id = user_details.get("user_id")

    await expense_services.delete_expense(id, session, user_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
