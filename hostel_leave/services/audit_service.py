# hostel_leave/services/audit_service.py

from uuid import UUID
from typing import Optional, Dict, Any, List

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from hostel_leave.models.audit import AuditLog
from hostel_leave.core.database import AsyncSessionLocal

# Note: no 'session' argument. This function manages its own session so it
# can run as a BackgroundTask after the request session is closed.
async def log_activity(
    action: str,
    actor_id: UUID,
    actor_role: Optional[str] = None,
    actor_name: Optional[str] = None,
    leave_id: Optional[UUID] = None,
    remarks: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
):
    async with AsyncSessionLocal() as session:
        try:
            session.add(AuditLog(
                actor_id=actor_id,
                actor_role=actor_role,
                actor_name=actor_name,
                leave_id=leave_id,
                action=action,
                remarks=remarks,
                details=details or {}
            ))
            await session.commit()
        except Exception:
            # the response has already gone out; keep the worker alive
            logger.exception(f"Audit log write failed for action '{action}' on leave {leave_id}")
            await session.rollback()


async def list_audit_logs(
    session: AsyncSession,
    leave_id: Optional[UUID] = None,
    action: Optional[str] = None,
    limit: int = 100,
) -> List[AuditLog]:
    query = select(AuditLog).order_by(AuditLog.timestamp.desc()).limit(limit)
    if leave_id is not None:
        query = query.where(AuditLog.leave_id == leave_id)
    if action:
        query = query.where(AuditLog.action == action)

    result = await session.execute(query)
    return list(result.scalars().all())
