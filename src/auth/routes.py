"""Authentication API routes.

This module defines the REST API endpoints for user authentication workflows.
"""

from fastapi import APIRouter, Depends, status, Response, Request, HTTPException
from src.auth.services import AuthServices
from src.auth.schemas import (
    LoginInput,
    LoginResponse,
    UserResponse,
    RenewAccessTokenResponse,
    LogoutInput,
    LogoutResponse
)
from sqlmodel.ext.asyncio.session import AsyncSession
from src.db.main import get_Session
from src.config import Config

from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from src.utils.limiter import limiter
from src.utils.auth import get_current_user


authRouter = APIRouter()

authServices = AuthServices()
security = HTTPBearer(auto_error=False)

cookie_settings = {
    "httponly": True,
    "secure": Config.COOKIE_SECURE,
    "samesite": "none" if Config.COOKIE_SECURE else "lax"
}

ACCESS_COOKIE_MAX_AGE = Config.ACCESS_TOKEN_EXPIRY_MINUTES * 60
REFRESH_COOKIE_MAX_AGE = Config.REFRESH_TOKEN_EXPIRY_DAYS * 60 * 60 * 24


def set_token_cookies(response: Response, tokens: dict):
    response.set_cookie(
        key="access_token",
        value=tokens.get('access_token'),
        **cookie_settings,
        max_age=ACCESS_COOKIE_MAX_AGE
    )
    response.set_cookie(
        key="refresh_token",
        value=tokens.get('refresh_token'),
        **cookie_settings,
        max_age=REFRESH_COOKIE_MAX_AGE
    )


@authRouter.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
@limiter.limit("5/minute")
async def loginUser(
    loginInput: LoginInput,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_Session)
):
    """Authenticate user with dual-auth token delivery.

    - Web: Receives tokens in httponly cookies
    - Mobile: Extracts tokens from response body for manual storage
    """
    user = await authServices.login(loginInput, session)

    set_token_cookies(response, user)

    return {
        "success": True,
        "message": "login successful",
        "data": user
    }


@authRouter.get("/me", status_code=status.HTTP_200_OK, response_model=UserResponse)
async def get_me(
    user_info: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_Session)
):
    """Get current authenticated user details."""
    user = await authServices.get_user_by_id(user_info.get("user_id"), session)

    return {
        "success": True,
        "message": "User details fetched successfully",
        "data": user
    }



@authRouter.post("/renew_access_token", status_code=status.HTTP_201_CREATED, response_model=RenewAccessTokenResponse)
@limiter.limit("5/minute")
async def renewAccessToken(
    request: Request,
    response: Response,
    bearer_token: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_Session)
):
    """Renew access token using refresh token.

    - Web (cookies): Returns new tokens in cookies and empty response body
    - Mobile (bearer): Returns new tokens in response body
    """
    bearer_raw = bearer_token.credentials if bearer_token else None
    cookie_raw = request.cookies.get('refresh_token')

    # Priority: Bearer token first, fallback to cookies
    token = bearer_raw or cookie_raw
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing"
        )

    # Basic structural check (JWT should have 2 dots)
    if token.count('.') != 2:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format"
        )

    new_token = await authServices.renewAccessToken(token, session)

    if bearer_raw:
        return {
            "success": True,
            "message": "access token renewed successfully",
            "data": new_token
        }

    set_token_cookies(response, new_token)
    return {
        "success": True,
        "message": "access token renewed successfully",
        "data": {}
    }


@authRouter.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    logout_input: LogoutInput,
    bearer_token: HTTPAuthorizationCredentials = Depends(security),
):
    """Logout user by revoking tokens.

    Both tokens are added to the Redis blocklist for immediate revocation.
    """

    await authServices.logout(request, response, logout_input, bearer_token)

    return {
        "success": True,
        "message": "Logged out successfully",
        "data": {}
    }
