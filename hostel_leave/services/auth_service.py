# hostel_leave/services/auth_service.py

from typing import List
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import uuid

from hostel_leave.core.config import settings
from hostel_leave.models.user import User, UserRole
from hostel_leave.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from hostel_leave.schemas.auth import TokenWithUser
from hostel_leave.schemas.user import UserRead


# ============================================================================
# FETCH USER
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id) -> User | None:
    if not isinstance(user_id, uuid.UUID):
        try:
            user_id = uuid.UUID(str(user_id))
        except ValueError:
            return None
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> List[User]:
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole,
) -> User:
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=email.lower(),
        password_hash=hash_password(password),
        role=role,
    )

    session.add(user)

    try:
        await session.commit()
        await session.refresh(user)
        return user

    except IntegrityError:
        await session.rollback()
        raise ValueError("User with this email already exists")


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(session, email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


# ============================================================================
# LOGIN RESPONSE
# ============================================================================
def create_login_response(user: User) -> TokenWithUser:
    token = create_access_token(
        subject=str(user.id),
        data={"role": user.role.value.lower()},
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
    )
