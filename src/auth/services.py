"""Authentication service layer.

This module implements the business logic for login, token rotation and
logout, and the ``check_user_exists`` guard that every ledger service runs
before touching an owner's rows.
"""

from sqlmodel import select
from src.auth.models import User
from src.auth.schemas import LoginInput, LogoutInput

from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status, Request, Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.exc import DatabaseError
from src.utils.auth import (
    verify_password_hash, create_token, decode_token,
    access_token_expiry, refresh_token_expiry,
)
from datetime import datetime, timezone
import logging
import uuid
from src.db.redis import redis_client


logger = logging.getLogger(__name__)


def parse_user_id(user_id) -> uuid.UUID:
    """Turn the token subject into a UUID, rejecting malformed subjects."""
    if isinstance(user_id, uuid.UUID):
        return user_id
    try:
        return uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You are not authorized to proceed"
        )


class AuthServices:
    """Service class for authentication operations."""

    async def get_user_by_username(self, username: str, session: AsyncSession):
        """Retrieves User by username.

        Args:
            username: Lower-cased username.
            session: Database session.

        Returns:
            User instance if found, None otherwise.
        """
        try:
            statement = select(User).where(User.username == username)
            result = await session.exec(statement)
            return result.first()
        except DatabaseError:
            logger.exception("Database error during user lookup")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="internal server error"
            )

    async def get_user_by_id(self, user_id, session: AsyncSession):
        statement = select(User).where(User.user_id == parse_user_id(user_id))
        result = await session.exec(statement)
        user = result.first()

        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        return user

    async def check_user_exists(self, user_id, session: AsyncSession) -> uuid.UUID:
        """Checks that the token's user still exists.

        Args:
            user_id: User id taken from the access token.
            session: Database session.

        Returns:
            The user id as a UUID, ready for owner-scoped queries.

        Raises:
            HTTPException: 401 if the user does not exist.
        """
        user_uuid = parse_user_id(user_id)
        statement = select(User).where(User.user_id == user_uuid)
        result = await session.exec(statement)
        user = result.first()

        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="You are not authorized to proceed"
            )

        return user_uuid

    async def login(self, loginInput: LoginInput, session: AsyncSession):
        """Authenticate user and generate tokens for dual-auth delivery.

        Returns both access and refresh tokens in response dict for dual delivery:
        - Route layer sets tokens as httponly cookies (web clients)
        - Response body contains tokens (mobile clients extract and store)

        Raises:
            HTTPException: If credentials invalid.
        """

        username_lower = loginInput.username.lower()
        user = await self.get_user_by_username(username_lower, session)

        # Reusable exception for invalid credentials
        INVALID_CREDENTIALS = HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Credentials"
        )

        if not user:
            raise INVALID_CREDENTIALS

        if not verify_password_hash(loginInput.password, user.password_hash):
            raise INVALID_CREDENTIALS

        user_dict = user.model_dump()
        access_token = create_token(user_dict, access_token_expiry, type="access")
        refresh_token = create_token(user_dict, refresh_token_expiry, type="refresh")

        logger.info("User %s logged in", user.user_id)

        return {
            **user_dict,
            'access_token': access_token,
            'refresh_token': refresh_token,
        }

    async def renewAccessToken(self, old_refresh_token_str: str,  session: AsyncSession):
        """Renew access token using refresh token with rotation.

        The old refresh token is blocklisted and a new refresh token is
        issued alongside the new access token.

        Raises:
            HTTPException: If token invalid, expired, or already used (rotation detection).
        """
        old_refresh_token_decode = decode_token(old_refresh_token_str)

        if old_refresh_token_decode.get('type') != "refresh":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token type"
            )

        # Detect refresh token reuse
        jti = old_refresh_token_decode.get('jti')
        if await self.is_token_blacklisted(jti):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Refresh token reused. Login required."
            )

        user = await self.get_user_by_id(old_refresh_token_decode.get("sub"), session)

        user_data = {
            "user_id": user.user_id,
            "username": user.username
        }

        new_token = create_token(user_data, expiry_delta=access_token_expiry, type="access")

        await self.add_token_to_blocklist(old_refresh_token_str)

        new_refresh_token = create_token(user_data, expiry_delta=refresh_token_expiry, type="refresh")

        return {
            "access_token" : new_token,
            "refresh_token": new_refresh_token
        }

    async def add_token_to_blocklist(self, token):
        """Revokes token by adding to Redis blocklist.

        Args:
            token: JWT token string to revoke.
        """
        token_decoded = decode_token(token)
        token_id = token_decoded.get('jti')
        exp_timestamp = token_decoded.get('exp')

        # Only blocklist until natural expiry
        current_time = datetime.now(timezone.utc).timestamp()
        time_to_live = int(exp_timestamp - current_time)

        if time_to_live > 0:
            await redis_client.setex(name=token_id, time=time_to_live, value="true")

    async def is_token_blacklisted(self, jti: str) -> bool:
        result = await redis_client.get(jti)
        return result is not None


    async def logout(
            self,
    request: Request,
    response: Response,
    logout_input: LogoutInput,
    bearer_token: HTTPAuthorizationCredentials,
):
        """Logout user by revoking tokens.

        - Mobile: access token in the Authorization header, refresh token in the body
        - Web: both tokens in cookies

        Raises:
            HTTPException: If no tokens found in either source.
        """

        if bearer_token:
            access_token = bearer_token.credentials
            refresh_token = logout_input.refresh_token

        else:
            access_token = request.cookies.get("access_token")
            refresh_token = request.cookies.get("refresh_token")

        if access_token is None and refresh_token is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Refresh token missing"
            )

        if access_token:
            await self.add_token_to_blocklist(access_token)
        if refresh_token:
            await self.add_token_to_blocklist(refresh_token)

        # Delete cookies (harmless for mobile, necessary for web)
        response.delete_cookie(key="access_token")
        response.delete_cookie(key="refresh_token")
