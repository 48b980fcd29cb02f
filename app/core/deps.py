# /formify-backend/app/core/deps.py

"""
Request identity for the API routers.

Authentication happens upstream of this service. The gateway forwards the
authenticated user's id in the `X-User-Id` header, and these dependencies
turn it into a `User` row and enforce the router's role.
"""

from typing import Optional
from fastapi import Depends, Header, HTTPException, status

from ..db.models.user_models import User
from ..models.user_model import UserRole
from ..services.database_service import DatabaseService, get_db_service


def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    db: DatabaseService = Depends(get_db_service),
) -> User:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    user = db.get_user_by_id(x_user_id.strip())
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return user


def require_role(role: UserRole):
    """Dependency factory: the current user, provided they hold `role`."""
    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role != role.value:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return dependency


require_student = require_role(UserRole.STUDENT)
require_teacher = require_role(UserRole.TEACHER)
require_admin = require_role(UserRole.ADMIN)
