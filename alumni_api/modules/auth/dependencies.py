from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional, Callable
import uuid

from alumni_api.core.database import get_db
from alumni_api.core.exceptions import AuthenticationError, AuthorizationError, InactiveAccountError
from alumni_api.core.logging_config import set_user_id
from alumni_api.core.security import decode_token
from alumni_api.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


async def _resolve_user(token: str, db: AsyncSession) -> User:
    payload = decode_token(token, expected_type="access")
    user_id = payload["sub"]

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise AuthenticationError("Invalid user ID format")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise InactiveAccountError()

    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    user = await _resolve_user(credentials.credentials, db)
    request.state.user_id = str(user.id)
    set_user_id(str(user.id))
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Current user for public endpoints.

    Missing or unusable credentials fall back to anonymous access.
    """
    if credentials is None:
        return None

    try:
        user = await _resolve_user(credentials.credentials, db)
    except (AuthenticationError, AuthorizationError):
        return None

    request.state.user_id = str(user.id)
    set_user_id(str(user.id))
    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Role gate dependency.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(UserRole.ADMIN))])
    """
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return role_checker


get_current_admin = require_roles(UserRole.ADMIN)


def is_owner_or_admin(user: User, owner_id) -> bool:
    return user.role == UserRole.ADMIN or str(user.id) == str(owner_id)


def ensure_owner_or_admin(user: User, owner_id, action: str = "modify this resource") -> None:
    """Ownership gate for mutations; creators and admins pass"""
    if not is_owner_or_admin(user, owner_id):
        raise AuthorizationError(f"Not authorized to {action}")
