# hostel_leave/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime, timezone

class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # no FK: the trail outlives hard-deleted leave applications
    leave_id: Optional[UUID] = Field(default=None, index=True)
    actor_id: Optional[UUID] = Field(default=None, foreign_key="users.id")
    actor_role: Optional[str] = None

    # snapshot of the actor's name at the time of the action
    actor_name: Optional[str] = None

    action: str
    remarks: Optional[str] = None

    # e.g. {"status": "approved", "start_date": "..."}
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
