# hostel_leave/schemas/leave.py

from pydantic import BaseModel
from typing import List, Optional, Union
from uuid import UUID
from datetime import date, datetime

from hostel_leave.models.enums import LeaveDecision, LeaveStatus, LeaveType


# ============================================================
# STUDENT → create / edit payload
# ============================================================
class LeaveInput(BaseModel):
    """Candidate fields for a create or a full-replace edit.

    Everything is optional at this layer so that a missing value surfaces
    as a ``MissingField`` from the lifecycle validation rather than a
    generic 422. Dates accept either a date or a full timestamp; the
    time-of-day is dropped during validation.
    """

    leave_type: Optional[Union[LeaveType, str]] = None
    start_date: Optional[Union[datetime, date]] = None
    end_date: Optional[Union[datetime, date]] = None
    reason: Optional[str] = None
    destination: Optional[str] = None
    contact_during_leave: Optional[str] = None
    parent_approval: bool = False

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "leave_type": "home",
                    "start_date": "2026-10-20",
                    "end_date": "2026-10-22",
                    "reason": "Family function",
                    "destination": "Lucknow",
                    "contact_during_leave": "9876543210",
                    "parent_approval": True
                }
            ]
        }


# ============================================================
# ENGINE VALUE TYPE (one persisted leave application)
# ============================================================
class LeaveRecord(BaseModel):
    id: UUID
    student_id: UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    destination: str
    contact_during_leave: str
    parent_approval: bool = False
    status: LeaveStatus = LeaveStatus.Pending
    remarks: Optional[str] = None
    approved_by: Optional[UUID] = None
    approval_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    version: int = 1

    class Config:
        from_attributes = True
        frozen = True


class LeaveDeletion(BaseModel):
    """Signal that a leave application should be removed from the store."""

    id: UUID
    version: int


# ============================================================
# READ (record + derived display fields)
# ============================================================
class LeaveRead(LeaveRecord):
    duration_days: int
    duration_label: str
    status_label: str
    # filled on admin views only
    student_name: Optional[str] = None


class StatusCounts(BaseModel):
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total: int = 0


class LeaveListResponse(BaseModel):
    data: List[LeaveRead]
    counts: StatusCounts


# ============================================================
# ADMIN → decision payload
# ============================================================
class LeaveDecisionRequest(BaseModel):
    status: LeaveStatus
    remarks: Optional[str] = None

    def to_decision(self) -> Optional[LeaveDecision]:
        if self.status is LeaveStatus.Approved:
            return LeaveDecision.Approve
        if self.status is LeaveStatus.Rejected:
            return LeaveDecision.Reject
        return None
