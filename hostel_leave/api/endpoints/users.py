# hostel_leave/api/endpoints/users.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from hostel_leave.api.deps import get_db_session
from hostel_leave.core.rbac import require_admin
from hostel_leave.schemas.user import UserCreate, UserRead
from hostel_leave.services.auth_service import get_user_by_email, create_user, list_users
from hostel_leave.models.user import User

router = APIRouter(prefix="/api/users", tags=["Users"])


# -------------------------------------------------------------------
# Create a student or admin account (Admin only)
# -------------------------------------------------------------------
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin)
):
    existing = await get_user_by_email(session, data.email)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    try:
        return await create_user(session, data.name, data.email, data.password, role=data.role)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# -------------------------------------------------------------------
# List all users (Admin only)
# -------------------------------------------------------------------
@router.get("/", response_model=List[UserRead])
async def get_users(
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin)
):
    return await list_users(session)
