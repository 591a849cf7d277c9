# hostel_leave/models/leave.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from datetime import date, datetime
import uuid
from typing import Optional

from hostel_leave.models.enums import LeaveStatus, LeaveType


class LeaveApplication(SQLModel, table=True):
    __tablename__ = "leave_applications"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    student_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    )

    leave_type: LeaveType = Field(
        default=LeaveType.Home,
        sa_column=Column(SAEnum(LeaveType, name="leave_type"), nullable=False)
    )

    start_date: date = Field(sa_column=Column(Date, nullable=False))
    end_date: date = Field(sa_column=Column(Date, nullable=False))

    reason: str = Field(sa_column=Column(Text, nullable=False))
    destination: str = Field(sa_column=Column(String(255), nullable=False))
    contact_during_leave: str = Field(sa_column=Column(String(64), nullable=False))

    parent_approval: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )

    status: LeaveStatus = Field(
        default=LeaveStatus.Pending,
        sa_column=Column(SAEnum(LeaveStatus, name="leave_status"), nullable=False, index=True)
    )

    remarks: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True)
    )

    approved_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )

    approval_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))

    # bumped on every write; writes are conditioned on the value that was read
    version: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))
