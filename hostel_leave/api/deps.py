# hostel_leave/api/deps.py

from datetime import date, datetime, timezone
from typing import AsyncGenerator
from zoneinfo import ZoneInfo

import jwt
from loguru import logger
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_leave.core.config import settings
from hostel_leave.core.exceptions import (
    Forbidden,
    InvalidDateRange,
    InvalidState,
    LeaveNotFound,
    MissingField,
)
from hostel_leave.core.security import decode_token
from hostel_leave.core.database import get_session
from hostel_leave.services.auth_service import get_user_by_id
from hostel_leave.models.user import User


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Clock (overridden in tests)
# ------------------------------------------------------------
def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_today(now: datetime = Depends(get_now)) -> date:
    return now.astimezone(ZoneInfo(settings.LEAVE_TIMEZONE)).date()


# ------------------------------------------------------------
# Get current logged-in user from JWT
# ------------------------------------------------------------
async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Could not validate credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")

    user = await get_user_by_id(session, user_id)
    if not user:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")

    return user


# ------------------------------------------------------------
# Leave errors → HTTP
# ------------------------------------------------------------
LEAVE_ERROR_STATUS = {
    MissingField: status.HTTP_400_BAD_REQUEST,
    InvalidDateRange: status.HTTP_400_BAD_REQUEST,
    Forbidden: status.HTTP_403_FORBIDDEN,
    InvalidState: status.HTTP_409_CONFLICT,
}


def leave_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, LeaveNotFound):
        return HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail={"message": str(exc), "kind": "LeaveNotFound", "field": None},
        )

    code = LEAVE_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.warning(f"Leave operation rejected ({getattr(exc, 'kind', type(exc).__name__)}): {exc}")
    return HTTPException(
        status_code=code,
        detail={
            "message": getattr(exc, "message", str(exc)),
            "kind": getattr(exc, "kind", "LeaveError"),
            "field": getattr(exc, "field", None),
        },
    )
