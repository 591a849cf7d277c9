# hostel_leave/api/endpoints/student_leave.py

from datetime import date, datetime
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_leave.api.deps import get_db_session, get_now, get_today, leave_http_error
from hostel_leave.core.exceptions import LeaveError, LeaveNotFound, MissingField
from hostel_leave.core.rbac import require_student
from hostel_leave.models.user import User
from hostel_leave.schemas.leave import LeaveInput, LeaveListResponse, LeaveRead
from hostel_leave.services.audit_service import log_activity
from hostel_leave.services.leave_service import (
    create_leave,
    delete_leave,
    edit_leave,
    get_leave,
    list_leaves,
)
from hostel_leave.services.leave_views import filter_by_status, group_counts, to_read

router = APIRouter(
    prefix="/api/student/leave",
    tags=["Leave (Student)"]
)


# ------------------------------------------------------------
# LIST MY LEAVE APPLICATIONS
# ------------------------------------------------------------
@router.get("", response_model=LeaveListResponse)
async def list_my_leaves(
    status_filter: str = Query("all", alias="status"),
    current_user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db_session),
):
    records = await list_leaves(session, student_id=current_user.id)
    try:
        visible = filter_by_status(records, status_filter)
    except ValueError:
        raise leave_http_error(
            MissingField("status", f"Unknown status filter '{status_filter}'")
        )

    # badge counts are over everything the student owns, not the filtered tab
    return LeaveListResponse(
        data=[to_read(r) for r in visible],
        counts=group_counts(records),
    )


# ------------------------------------------------------------
# CREATE LEAVE APPLICATION
# ------------------------------------------------------------
@router.post("", response_model=LeaveRead, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: LeaveInput,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db_session),
    today: date = Depends(get_today),
    now: datetime = Depends(get_now),
):
    try:
        record = await create_leave(session, current_user.id, payload, today, now)
    except LeaveError as e:
        raise leave_http_error(e)

    background_tasks.add_task(
        log_activity,
        action="created",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        actor_name=current_user.name,
        leave_id=record.id,
        details={
            "leave_type": record.leave_type.value,
            "start_date": record.start_date.isoformat(),
            "end_date": record.end_date.isoformat(),
        },
    )
    return to_read(record)


# ------------------------------------------------------------
# GET ONE OF MY LEAVE APPLICATIONS
# ------------------------------------------------------------
@router.get("/{leave_id}", response_model=LeaveRead)
async def get_my_leave(
    leave_id: UUID,
    current_user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        record = await get_leave(session, leave_id)
    except LeaveNotFound as e:
        raise leave_http_error(e)

    # someone else's leave is reported as missing rather than forbidden
    if str(record.student_id) != str(current_user.id):
        raise leave_http_error(LeaveNotFound(f"Leave application {leave_id} not found"))

    return to_read(record)


# ------------------------------------------------------------
# EDIT (full replace, pending only)
# ------------------------------------------------------------
@router.put("/{leave_id}/edit", response_model=LeaveRead)
async def edit_my_leave(
    leave_id: UUID,
    payload: LeaveInput,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db_session),
    today: date = Depends(get_today),
    now: datetime = Depends(get_now),
):
    try:
        record = await edit_leave(
            session, leave_id, payload, current_user.role, current_user.id, today, now
        )
    except (LeaveError, LeaveNotFound) as e:
        raise leave_http_error(e)

    background_tasks.add_task(
        log_activity,
        action="edited",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        actor_name=current_user.name,
        leave_id=record.id,
        details={"version": record.version},
    )
    return to_read(record)


# ------------------------------------------------------------
# DELETE (hard delete, pending only)
# ------------------------------------------------------------
@router.delete("/{leave_id}/delete")
async def delete_my_leave(
    leave_id: UUID,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_student),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        removed = await delete_leave(session, leave_id, current_user.role, current_user.id)
    except (LeaveError, LeaveNotFound) as e:
        raise leave_http_error(e)

    background_tasks.add_task(
        log_activity,
        action="deleted",
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        actor_name=current_user.name,
        leave_id=removed.id,
    )
    return {"detail": "Leave application deleted successfully", "id": str(removed.id)}
