# hostel_leave/services/leave_service.py

from datetime import date, datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from hostel_leave.core.config import settings
from hostel_leave.core.exceptions import InvalidState, LeaveNotFound
from hostel_leave.models.enums import LeaveDecision
from hostel_leave.models.leave import LeaveApplication
from hostel_leave.models.user import User
from hostel_leave.schemas.leave import LeaveDeletion, LeaveInput, LeaveRecord
from hostel_leave.services.leave_lifecycle import (
    create_leave_record,
    delete_leave_record,
    edit_leave_record,
    ensure_no_overlap,
    transition_leave_record,
)

# columns the store owns; never copied from an engine result into an UPDATE
IMMUTABLE_COLUMNS = {"id", "student_id", "created_at", "version"}

CONFLICT_MESSAGE = "Leave application was modified concurrently; reload it and try again"


def to_record(row: LeaveApplication) -> LeaveRecord:
    return LeaveRecord.model_validate(row)


# ============================================================================
# READS
# ============================================================================
async def get_leave(session: AsyncSession, leave_id: UUID) -> LeaveRecord:
    result = await session.execute(
        select(LeaveApplication).where(LeaveApplication.id == leave_id)
    )
    row = result.scalar_one_or_none()
    if not row:
        raise LeaveNotFound(f"Leave application {leave_id} not found")
    return to_record(row)


async def list_leaves(session: AsyncSession, student_id: Optional[UUID] = None) -> List[LeaveRecord]:
    """Newest first. Restricted to one student when ``student_id`` is given."""
    query = select(LeaveApplication).order_by(
        LeaveApplication.created_at.desc(), LeaveApplication.id
    )
    if student_id is not None:
        query = query.where(LeaveApplication.student_id == student_id)

    result = await session.execute(query)
    return [to_record(row) for row in result.scalars().all()]


async def list_leaves_with_students(session: AsyncSession) -> List[Tuple[LeaveRecord, Optional[str]]]:
    """Every leave, newest first, paired with the owning student's name."""
    result = await session.execute(
        select(LeaveApplication, User.name)
        .join(User, User.id == LeaveApplication.student_id, isouter=True)
        .order_by(LeaveApplication.created_at.desc(), LeaveApplication.id)
    )
    return [(to_record(row), name) for row, name in result.all()]


async def get_student_names(session: AsyncSession, student_ids) -> Dict[UUID, str]:
    ids = set(student_ids)
    if not ids:
        return {}
    result = await session.execute(select(User.id, User.name).where(User.id.in_(ids)))
    return {uid: name for uid, name in result.all()}


# ============================================================================
# WRITES (compare-and-swap on version)
# ============================================================================
async def _swap(session: AsyncSession, existing: LeaveRecord, new: LeaveRecord) -> LeaveRecord:
    values = new.model_dump(exclude=IMMUTABLE_COLUMNS)
    result = await session.execute(
        update(LeaveApplication)
        .where(
            (LeaveApplication.id == existing.id) &
            (LeaveApplication.version == existing.version)
        )
        .values(**values, version=existing.version + 1)
    )
    if result.rowcount != 1:
        await session.rollback()
        logger.warning(f"Version conflict on leave {existing.id} (expected v{existing.version})")
        raise InvalidState(CONFLICT_MESSAGE)

    await session.commit()
    return new.model_copy(update={"version": existing.version + 1})


async def _check_overlap(
    session: AsyncSession,
    student_id: UUID,
    start_date: date,
    end_date: date,
    exclude_id: Optional[UUID],
    block_overlap: Optional[bool],
):
    if block_overlap is None:
        block_overlap = settings.LEAVE_BLOCK_OVERLAP
    if not block_overlap:
        return
    others = await list_leaves(session, student_id=student_id)
    ensure_no_overlap(others, start_date, end_date, exclude_id=exclude_id)


async def create_leave(
    session: AsyncSession,
    student_id: UUID,
    data: LeaveInput,
    today: date,
    now: datetime,
    block_overlap: Optional[bool] = None,
) -> LeaveRecord:
    record = create_leave_record(data, student_id, today, now)
    await _check_overlap(session, student_id, record.start_date, record.end_date, None, block_overlap)

    session.add(LeaveApplication(**record.model_dump()))
    await session.commit()

    logger.info(f"Leave {record.id} created by student {student_id} ({record.start_date} → {record.end_date})")
    return record


async def edit_leave(
    session: AsyncSession,
    leave_id: UUID,
    data: LeaveInput,
    actor_role,
    actor_id: UUID,
    today: date,
    now: datetime,
    block_overlap: Optional[bool] = None,
) -> LeaveRecord:
    existing = await get_leave(session, leave_id)
    updated = edit_leave_record(existing, data, actor_role, actor_id, today, now)
    await _check_overlap(
        session, existing.student_id, updated.start_date, updated.end_date, existing.id, block_overlap
    )

    saved = await _swap(session, existing, updated)
    logger.info(f"Leave {leave_id} edited by {actor_id}")
    return saved


async def delete_leave(session: AsyncSession, leave_id: UUID, actor_role, actor_id: UUID) -> LeaveRecord:
    """Returns the record as it was just before removal."""
    existing = await get_leave(session, leave_id)
    signal: LeaveDeletion = delete_leave_record(existing, actor_role, actor_id)

    result = await session.execute(
        delete(LeaveApplication).where(
            (LeaveApplication.id == signal.id) &
            (LeaveApplication.version == signal.version)
        )
    )
    if result.rowcount != 1:
        await session.rollback()
        logger.warning(f"Version conflict deleting leave {leave_id}")
        raise InvalidState(CONFLICT_MESSAGE)

    await session.commit()
    logger.info(f"Leave {leave_id} deleted by {actor_id}")
    return existing


async def decide_leave(
    session: AsyncSession,
    leave_id: UUID,
    decision: LeaveDecision,
    remarks: Optional[str],
    actor_role,
    approver_id: UUID,
    now: datetime,
) -> LeaveRecord:
    existing = await get_leave(session, leave_id)
    decided = transition_leave_record(existing, actor_role, decision, remarks, approver_id, now)

    saved = await _swap(session, existing, decided)
    logger.info(f"Leave {leave_id} {saved.status.value} by {approver_id}")
    return saved
