# hostel_leave/api/endpoints/admin_leave.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_leave.api.deps import get_db_session, get_now, leave_http_error
from hostel_leave.core.exceptions import LeaveError, LeaveNotFound, MissingField
from hostel_leave.core.rbac import require_admin
from hostel_leave.models.user import User
from hostel_leave.schemas.audit import AuditLogRead
from hostel_leave.schemas.leave import LeaveDecisionRequest, LeaveListResponse, LeaveRead
from hostel_leave.services.audit_service import list_audit_logs, log_activity
from hostel_leave.services.leave_service import (
    decide_leave,
    get_leave,
    get_student_names,
    list_leaves_with_students,
)
from hostel_leave.services.leave_views import (
    filter_by_status,
    group_counts,
    search_records,
    to_read,
)

router = APIRouter(
    prefix="/api/admin/leave",
    tags=["Leave (Admin)"]
)


# ===================================================================
# LIST ALL LEAVE APPLICATIONS (status tab + search box)
# ===================================================================
@router.get("", response_model=LeaveListResponse)
async def list_all_leaves(
    status_filter: str = Query("all", alias="status"),
    q: Optional[str] = Query(None, description="Search student name, student id, reason, destination or contact"),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    rows = await list_leaves_with_students(session)
    records = [record for record, _name in rows]
    names = {record.student_id: name for record, name in rows if name}

    try:
        visible = filter_by_status(search_records(records, q, names), status_filter)
    except ValueError:
        raise leave_http_error(
            MissingField("status", f"Unknown status filter '{status_filter}'")
        )

    # tab badges count every application; the search box narrows the rows only
    return LeaveListResponse(
        data=[to_read(r, names.get(r.student_id)) for r in visible],
        counts=group_counts(records),
    )


# ===================================================================
# DETAIL
# ===================================================================
@router.get("/{leave_id}", response_model=LeaveRead)
async def get_leave_detail(
    leave_id: UUID,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    try:
        record = await get_leave(session, leave_id)
    except LeaveNotFound as e:
        raise leave_http_error(e)

    names = await get_student_names(session, [record.student_id])
    return to_read(record, names.get(record.student_id))


# ===================================================================
# APPROVE / REJECT
# ===================================================================
@router.put("/{leave_id}", response_model=LeaveRead)
async def update_leave_status(
    leave_id: UUID,
    payload: LeaveDecisionRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
    now: datetime = Depends(get_now),
):
    decision = payload.to_decision()
    if decision is None:
        raise leave_http_error(MissingField("status", "status must be 'approved' or 'rejected'"))

    try:
        record = await decide_leave(
            session, leave_id, decision, payload.remarks, current_user.role, current_user.id, now
        )
    except (LeaveError, LeaveNotFound) as e:
        raise leave_http_error(e)

    background_tasks.add_task(
        log_activity,
        action=record.status.value,
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        actor_name=current_user.name,
        leave_id=record.id,
        remarks=record.remarks,
        details={"student_id": str(record.student_id)},
    )
    names = await get_student_names(session, [record.student_id])
    return to_read(record, names.get(record.student_id))


# ===================================================================
# HISTORY (audit trail of one application)
# ===================================================================
@router.get("/{leave_id}/history", response_model=List[AuditLogRead])
async def get_leave_history(
    leave_id: UUID,
    limit: int = Query(100, ge=1, le=500),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await list_audit_logs(session, leave_id=leave_id, limit=limit)
