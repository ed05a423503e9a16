# app/core/permissions.py

from typing import Iterable

from fastapi import Depends, HTTPException, status

from app.api.auth import get_current_user
from app.models.user import User


def require_roles(roles: Iterable):
    allowed = {getattr(r, "value", r) for r in roles}

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role.value not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return user

    return checker
