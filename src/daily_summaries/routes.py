from fastapi import APIRouter, Depends, Request, Response, status
from src.utils.auth import get_current_user
from src.daily_summaries.schemas import DailySummaryListResponse
from src.daily_summaries.services import DailySummaryServices
from sqlmodel.ext.asyncio.session import AsyncSession
from src.db.main import get_Session
from src.utils.limiter import limiter


daily_summary_router = APIRouter()
daily_summary_services = DailySummaryServices()


@daily_summary_router.get("", response_model=DailySummaryListResponse, status_code=status.HTTP_200_OK)
@limiter.limit("100/minute")
async def get_daily_summaries(
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_Session),
    user_details: dict = Depends(get_current_user)
):
    user_id = user_details.get("user_id")

    summaries = await daily_summary_services.get_daily_summaries(session, user_id)

    return {
        "success": True,
        "message": "daily summaries fetched successfully",
        "data": summaries
    }
