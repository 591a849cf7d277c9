# hostel_leave/core/rbac.py

from fastapi import Depends, HTTPException, status
from hostel_leave.api.deps import get_current_user
from hostel_leave.models.user import User, UserRole

def AllowRoles(*allowed_roles):
    """
    Router-level role gate.
    - Accepts UserRole values or raw strings
    - Case-insensitive
    Ownership and record state are checked by the leave lifecycle, not here.
    """

    def normalize(role) -> str:
        if isinstance(role, UserRole):
            return role.value.lower().strip()
        return str(role).lower().strip()

    normalized_allowed = {normalize(r) for r in allowed_roles}

    async def role_checker(current_user: User = Depends(get_current_user)):
        if normalize(current_user.role) not in normalized_allowed:
            readable_role = (
                current_user.role.value if isinstance(current_user.role, UserRole)
                else str(current_user.role)
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{readable_role}'"
            )

        return current_user

    return role_checker


require_admin = AllowRoles(UserRole.Admin)
require_student = AllowRoles(UserRole.Student)
