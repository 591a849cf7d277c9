# hostel_leave/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import datetime, timezone
import uuid
from enum import Enum

class UserRole(str, Enum):
    Admin = "Admin"
    Student = "Student"

class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    name: str = Field(nullable=False)
    email: str = Field(nullable=False, index=True, unique=True)
    password_hash: str = Field(nullable=False)

    role: UserRole = Field(
        sa_column=Column(SAEnum(UserRole, name="user_role"), nullable=False)
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
