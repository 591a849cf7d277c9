# hostel_leave/services/leave_views.py

from typing import Iterable, List, Mapping, Optional, Sequence, Union
from uuid import UUID

from hostel_leave.models.enums import LeaveStatus
from hostel_leave.schemas.leave import LeaveRead, LeaveRecord, StatusCounts
from hostel_leave.services.leave_lifecycle import leave_duration

ALL_STATUSES = "all"

STATUS_LABELS = {
    LeaveStatus.Pending: "Pending",
    LeaveStatus.Approved: "Approved",
    LeaveStatus.Rejected: "Rejected",
}


def parse_status_filter(value: Union[str, LeaveStatus, None]) -> Union[str, LeaveStatus]:
    """Map a query-string value to a ``LeaveStatus`` or ``"all"``."""
    if value is None or isinstance(value, LeaveStatus):
        return value or ALL_STATUSES
    value = value.strip().lower()
    if not value or value == ALL_STATUSES:
        return ALL_STATUSES
    return LeaveStatus(value)


def filter_by_status(
    records: Iterable[LeaveRecord],
    status: Union[str, LeaveStatus] = ALL_STATUSES,
) -> List[LeaveRecord]:
    # keeps the incoming order; the store hands records over newest first
    status = parse_status_filter(status)
    if status == ALL_STATUSES:
        return list(records)
    return [r for r in records if r.status is status]


def group_counts(records: Iterable[LeaveRecord]) -> StatusCounts:
    counts = {s: 0 for s in LeaveStatus}
    total = 0
    for record in records:
        counts[record.status] += 1
        total += 1
    return StatusCounts(
        pending=counts[LeaveStatus.Pending],
        approved=counts[LeaveStatus.Approved],
        rejected=counts[LeaveStatus.Rejected],
        total=total,
    )


def search_records(
    records: Iterable[LeaveRecord],
    term: str | None,
    student_names: Optional[Mapping[UUID, str]] = None,
) -> List[LeaveRecord]:
    """Case-insensitive match on student name, student id, reason, destination or contact."""
    records = list(records)
    term = (term or "").strip().lower()
    if not term:
        return records
    student_names = student_names or {}

    def haystack(r: LeaveRecord) -> Sequence[str]:
        return (
            student_names.get(r.student_id) or "",
            str(r.student_id),
            r.reason,
            r.destination,
            r.contact_during_leave,
        )

    return [r for r in records if any(term in field.lower() for field in haystack(r))]


def status_label(status: LeaveStatus) -> str:
    return STATUS_LABELS[LeaveStatus(status)]


def duration_label(days: int) -> str:
    return f"{days} day{'' if days == 1 else 's'}"


def to_read(record: LeaveRecord, student_name: Optional[str] = None) -> LeaveRead:
    days = leave_duration(record.start_date, record.end_date)
    return LeaveRead(
        **record.model_dump(),
        duration_days=days,
        duration_label=duration_label(days),
        status_label=status_label(record.status),
        student_name=student_name,
    )
