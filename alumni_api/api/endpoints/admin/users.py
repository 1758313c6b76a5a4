"""
Admin User Management endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import UserNotFoundError
from alumni_api.core.logging_config import logger
from alumni_api.models.user import User, UserRole
from alumni_api.modules.auth.dependencies import get_current_admin
from alumni_api.schemas.admin import (
    AdminUserListResponse,
    AdminUserMutationResponse,
    AdminUserStatusFilter,
    RoleUpdate,
    StatusUpdate,
)
from alumni_api.schemas.user import UserResponse
from alumni_api.utils.pagination import paginate

router = APIRouter()


async def get_user_or_404(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UserNotFoundError(user_id)
    return user


@router.get("", response_model=AdminUserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ADMIN_USERS_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    role: Optional[UserRole] = Query(None),
    status: Optional[AdminUserStatusFilter] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """All users including deactivated ones, newest first"""
    query = select(User)

    if role:
        query = query.where(User.role == role)
    if status:
        query = query.where(User.is_active == (status == AdminUserStatusFilter.ACTIVE))
    if search:
        query = query.where(or_(
            User.first_name.icontains(search, autoescape=True),
            User.last_name.icontains(search, autoescape=True),
            User.email.icontains(search, autoescape=True),
        ))

    query = query.order_by(User.created_at.desc())
    users, pagination = await paginate(db, query, page, limit)

    return AdminUserListResponse(
        items=[UserResponse.from_user(u, full=True) for u in users],
        pagination=pagination,
    )


@router.put("/{user_id}/role", response_model=AdminUserMutationResponse)
async def update_role(
    user_id: str,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    user = await get_user_or_404(db, user_id)
    previous = user.role
    user.role = body.role
    await db.commit()

    logger.log_admin_action(
        admin_id=str(current_admin.id),
        action=f"changed role {previous.value} -> {body.role.value} for",
        target_type="user",
        target_id=user_id,
    )
    return AdminUserMutationResponse(
        message="User role updated successfully",
        user=UserResponse.from_user(user, full=True),
    )


@router.put("/{user_id}/status", response_model=AdminUserMutationResponse)
async def update_status(
    user_id: str,
    body: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    user = await get_user_or_404(db, user_id)
    user.is_active = body.is_active
    await db.commit()

    logger.log_admin_action(
        admin_id=str(current_admin.id),
        action="activated" if body.is_active else "deactivated",
        target_type="user",
        target_id=user_id,
    )
    return AdminUserMutationResponse(
        message=f"User {'activated' if body.is_active else 'deactivated'} successfully",
        user=UserResponse.from_user(user, full=True),
    )
