# hostel_leave/api/endpoints/auth.py

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_leave.api.deps import get_db_session, get_current_user
from hostel_leave.models.user import User
from hostel_leave.schemas.auth import LoginRequest, TokenWithUser
from hostel_leave.schemas.user import UserRead
from hostel_leave.services.auth_service import authenticate_user, create_login_response

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN (students and admins)
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    user = await authenticate_user(session, payload.email, payload.password)

    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return create_login_response(user)


# -------------------------------------------------------------------
# WHO AM I
# -------------------------------------------------------------------
@router.get("/me", response_model=UserRead)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
