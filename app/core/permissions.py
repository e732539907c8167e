"""Role-based access control."""

from enum import Enum
from typing import Any, Callable

from fastapi import Depends

from app.api.deps import get_current_active_user
from app.core.exceptions import UnauthorizedError
from app.models.user import User


class UserRole(str, Enum):
    """Account roles on the marketplace."""

    CONSUMER = "consumer"
    PROFESSIONAL = "professional"
    PROVIDER = "provider"  # agency managing several professionals
    SUPPLIER = "supplier"
    ADMIN = "admin"


def require_role(*allowed_roles: UserRole) -> Callable[..., Any]:
    """Dependency to require specific account roles."""

    async def role_checker(current_user: User = Depends(get_current_active_user)) -> User:
        if current_user.role not in {role.value for role in allowed_roles}:
            raise UnauthorizedError(
                f"Role '{current_user.role}' is not authorized for this action"
            )
        return current_user

    return role_checker


# Convenience dependencies
require_admin = require_role(UserRole.ADMIN)
