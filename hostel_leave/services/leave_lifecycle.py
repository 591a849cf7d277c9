# hostel_leave/services/leave_lifecycle.py
"""
Leave application lifecycle rules.

Everything in this module is pure: no database, no clock. Callers pass the
freshly read record together with ``today`` / ``now`` and persist whatever
comes back. Failures are raised as one of the four ``LeaveError`` kinds.

    pending ──approve──▶ approved   (terminal)
       │
       └────reject────▶ rejected   (terminal)
"""

import math
import uuid
from datetime import date, datetime
from typing import Iterable, List, Optional, Union

from hostel_leave.core.exceptions import Forbidden, InvalidDateRange, InvalidState, MissingField
from hostel_leave.models.enums import LeaveDecision, LeaveOperation, LeaveStatus, LeaveType
from hostel_leave.models.user import UserRole
from hostel_leave.schemas.leave import LeaveDeletion, LeaveInput, LeaveRecord

REQUIRED_TEXT_FIELDS = ("reason", "destination", "contact_during_leave")

OWNER_OPERATIONS = {LeaveOperation.Edit, LeaveOperation.Delete}


# ============================================================================
# VALIDATION
# ============================================================================
def _to_day(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _coerce_leave_type(value) -> LeaveType:
    if value is None or value == "":
        return LeaveType.Home
    if isinstance(value, LeaveType):
        return value
    try:
        return LeaveType(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in LeaveType)
        raise MissingField("leave_type", f"leave_type must be one of: {allowed}")


def validate_leave_input(data: LeaveInput, today: Union[date, datetime]) -> LeaveInput:
    """Check a create/edit payload and return it normalized.

    Text is stripped, dates are truncated to the day and ``leave_type`` is
    coerced to ``LeaveType``. ``today`` may carry a time-of-day; it is
    ignored.
    """
    cleaned = {}
    for field in REQUIRED_TEXT_FIELDS:
        value = (getattr(data, field) or "").strip()
        if not value:
            raise MissingField(field)
        cleaned[field] = value

    if data.start_date is None:
        raise MissingField("start_date")
    if data.end_date is None:
        raise MissingField("end_date")

    leave_type = _coerce_leave_type(data.leave_type)

    start = _to_day(data.start_date)
    end = _to_day(data.end_date)
    today = _to_day(today)

    if start < today:
        raise InvalidDateRange("Start date cannot be in the past", field="start_date")
    if end < start:
        raise InvalidDateRange("End date cannot be before start date", field="end_date")

    return LeaveInput(
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        parent_approval=bool(data.parent_approval),
        **cleaned,
    )


def leave_duration(start_date: Union[date, datetime], end_date: Union[date, datetime]) -> int:
    """Inclusive day count: a leave starting and ending on the same day lasts 1 day."""
    delta = abs(_to_day(end_date) - _to_day(start_date))
    return max(1, math.ceil(delta.total_seconds() / 86400) + 1)


# ============================================================================
# OVERLAP
# ============================================================================
def dates_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return _to_day(a_start) <= _to_day(b_end) and _to_day(b_start) <= _to_day(a_end)


def find_overlaps(
    records: Iterable[LeaveRecord],
    start_date: date,
    end_date: date,
    exclude_id: Optional[uuid.UUID] = None,
) -> List[LeaveRecord]:
    """Non-rejected records whose date range intersects ``start_date..end_date``."""
    return [
        r for r in records
        if r.id != exclude_id
        and r.status is not LeaveStatus.Rejected
        and dates_overlap(r.start_date, r.end_date, start_date, end_date)
    ]


def ensure_no_overlap(
    records: Iterable[LeaveRecord],
    start_date: date,
    end_date: date,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    clashes = find_overlaps(records, start_date, end_date, exclude_id=exclude_id)
    if clashes:
        first = clashes[0]
        raise InvalidDateRange(
            f"Dates overlap an existing leave ({first.start_date} to {first.end_date})",
            field="start_date",
        )


# ============================================================================
# AUTHORIZATION
# ============================================================================
def _normalize_role(role) -> Optional[UserRole]:
    if isinstance(role, UserRole):
        return role
    for candidate in UserRole:
        if str(role).strip().lower() == candidate.value.lower():
            return candidate
    return None


def authorize(actor_role, actor_id, record: LeaveRecord, operation: LeaveOperation) -> None:
    """Raise unless ``actor`` may perform ``operation`` on ``record``.

    The pending check comes first, so a terminal record always answers
    ``InvalidState`` whoever asks.
    """
    try:
        operation = LeaveOperation(operation)
    except ValueError:
        raise Forbidden(f"Unsupported operation '{operation}'")
    role = _normalize_role(actor_role)

    if record.status is not LeaveStatus.Pending:
        raise InvalidState(
            f"Only pending leave applications can be {_past_tense(operation)} "
            f"(this one is {record.status.value})"
        )

    if operation in OWNER_OPERATIONS:
        if role is not UserRole.Student:
            raise Forbidden(f"Only students can {operation.value} leave applications")
        if str(actor_id) != str(record.student_id):
            raise Forbidden(f"You can only {operation.value} your own leave applications")
        return

    # approve / reject
    if role is not UserRole.Admin:
        raise Forbidden(f"Only admins can {operation.value} leave applications")


def _past_tense(operation: LeaveOperation) -> str:
    return {
        LeaveOperation.Edit: "edited",
        LeaveOperation.Delete: "deleted",
        LeaveOperation.Approve: "approved",
        LeaveOperation.Reject: "rejected",
    }[operation]


# ============================================================================
# OPERATIONS
# ============================================================================
def _replacement_fields(valid: LeaveInput) -> dict:
    return {
        "leave_type": _coerce_leave_type(valid.leave_type),
        "start_date": _to_day(valid.start_date),
        "end_date": _to_day(valid.end_date),
        "reason": valid.reason,
        "destination": valid.destination,
        "contact_during_leave": valid.contact_during_leave,
        "parent_approval": valid.parent_approval,
    }


def create_leave_record(
    data: LeaveInput,
    student_id: uuid.UUID,
    today: Union[date, datetime],
    now: datetime,
    leave_id: Optional[uuid.UUID] = None,
) -> LeaveRecord:
    valid = validate_leave_input(data, today)
    return LeaveRecord(
        id=leave_id or uuid.uuid4(),
        student_id=student_id,
        **_replacement_fields(valid),
        status=LeaveStatus.Pending,
        created_at=now,
        updated_at=now,
    )


def edit_leave_record(
    existing: LeaveRecord,
    data: LeaveInput,
    actor_role,
    actor_id,
    today: Union[date, datetime],
    now: datetime,
) -> LeaveRecord:
    authorize(actor_role, actor_id, existing, LeaveOperation.Edit)
    valid = validate_leave_input(data, today)
    return existing.model_copy(update={**_replacement_fields(valid), "updated_at": now})


def delete_leave_record(existing: LeaveRecord, actor_role, actor_id) -> LeaveDeletion:
    authorize(actor_role, actor_id, existing, LeaveOperation.Delete)
    return LeaveDeletion(id=existing.id, version=existing.version)


def transition_leave_record(
    existing: LeaveRecord,
    actor_role,
    decision: LeaveDecision,
    remarks: Optional[str],
    approver_id: uuid.UUID,
    now: datetime,
) -> LeaveRecord:
    try:
        decision = LeaveDecision(decision)
    except ValueError:
        raise Forbidden(f"Unsupported decision '{decision}'")
    authorize(actor_role, approver_id, existing, decision.operation)
    return existing.model_copy(update={
        "status": decision.target_status,
        "approved_by": approver_id,
        "approval_date": now,
        "remarks": remarks.strip() if remarks is not None else None,
        "updated_at": now,
    })
