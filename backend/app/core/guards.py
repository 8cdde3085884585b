"""
Security guards for role-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from backend.app.models.enums import ProfileRole
from backend.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[ProfileRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/admin/profiles/{profile_id}/credit-adjustments")
        async def adjust(current_user: dict = Depends(require_role([ProfileRole.ADMIN]))):
            ...

    Args:
        allowed_roles: List of ProfileRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency function that validates the profile role

    Raises:
        HTTPException 403 if the role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        try:
            role = ProfileRole(current_user.get("role"))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role"
            )

        if role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


require_admin = require_role([ProfileRole.ADMIN])
