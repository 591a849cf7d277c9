# hostel_leave/api/endpoints/logs.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from hostel_leave.api.deps import get_db_session
from hostel_leave.core.rbac import require_admin
from hostel_leave.models.user import User
from hostel_leave.schemas.audit import AuditLogRead
from hostel_leave.services.audit_service import list_audit_logs

router = APIRouter(prefix="/api/admin", tags=["Audit & Logs"])


# -------------------------------------------------------------------
# VIEW LEAVE WORKFLOW AUDIT LOGS
# -------------------------------------------------------------------
@router.get("/audit-logs", response_model=List[AuditLogRead])
async def get_audit_logs(
    action: Optional[str] = Query(None, description="created / edited / deleted / approved / rejected"),
    limit: int = Query(100, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
    _: User = Depends(require_admin),
):
    return await list_audit_logs(session, action=action, limit=limit)
