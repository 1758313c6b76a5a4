import time
from typing import Optional, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import UserNotFoundError, ValidationError
from alumni_api.core.logging_config import logger
from alumni_api.core.security import verify_password, get_password_hash
from alumni_api.models.user import User, MembershipStatus
from alumni_api.modules.auth.dependencies import get_current_user, get_optional_user
from alumni_api.schemas.common import MessageResponse
from alumni_api.schemas.user import (
    UserResponse,
    UserListResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    PreferencesUpdate,
    PreferencesResponse,
    PasswordChange,
    AccountDelete,
    preferences_from_user,
)
from alumni_api.utils.pagination import paginate
from alumni_api.utils.updates import flatten_update, merge_dict, apply_updates

router = APIRouter()

PROFILE_FIELD_MAP = {
    "location.city": "location_city",
    "location.country": "location_country",
}

PRIVACY_FIELD_MAP = {
    "privacy.show_email": "show_email",
    "privacy.show_phone": "show_phone",
    "privacy.show_location": "show_location",
}


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    graduation_year: Optional[int] = Query(None, ge=1900, le=2100),
    location: Optional[str] = Query(None, max_length=100),
    profession: Optional[str] = Query(None, max_length=100),
    search: Optional[str] = Query(None, max_length=100),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Alumni directory (active members only)"""
    query = select(User).where(User.is_active == True)  # noqa: E712

    if graduation_year:
        query = query.where(User.graduation_year == graduation_year)
    if location:
        query = query.where(User.location_city.icontains(location, autoescape=True))
    if profession:
        query = query.where(User.profession.icontains(profession, autoescape=True))
    if search:
        query = query.where(or_(
            User.first_name.icontains(search, autoescape=True),
            User.last_name.icontains(search, autoescape=True),
            User.profession.icontains(search, autoescape=True),
            User.company.icontains(search, autoescape=True),
            User.major.icontains(search, autoescape=True),
        ))

    query = query.order_by(User.created_at.desc())
    users, pagination = await paginate(db, query, page, limit)

    return UserListResponse(
        items=[UserResponse.from_user(u, viewer) for u in users],
        pagination=pagination,
    )


@router.get("/filters/graduation-years", response_model=List[int])
async def graduation_years(db: AsyncSession = Depends(get_db)):
    """Distinct graduation years of active members, newest first"""
    result = await db.execute(
        select(User.graduation_year)
        .where(User.is_active == True, User.graduation_year.isnot(None))  # noqa: E712
        .distinct()
        .order_by(User.graduation_year.desc())
    )
    return [row[0] for row in result.all()]


@router.get("/filters/locations", response_model=List[str])
async def locations(db: AsyncSession = Depends(get_db)):
    """Distinct cities of active members, sorted"""
    result = await db.execute(
        select(User.location_city)
        .where(User.is_active == True, User.location_city.isnot(None), User.location_city != "")  # noqa: E712
        .distinct()
        .order_by(User.location_city)
    )
    return [row[0] for row in result.all()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise UserNotFoundError(user_id)

    return UserResponse.from_user(user, viewer)


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update names, phone, avatar and profile fields; nested objects merge key by key"""
    data = body.model_dump(exclude_unset=True)
    profile = data.pop("profile", None) or {}
    social_links = profile.pop("social_links", None)

    values = flatten_update(data)
    values.update(flatten_update(profile, PROFILE_FIELD_MAP))
    if social_links:
        values["social_links"] = merge_dict(current_user.social_links, social_links)

    changed = apply_updates(current_user, values)
    await db.commit()

    logger.info(
        f"Profile updated for user {current_user.id}",
        extra={"event_type": "profile_update", "fields": changed}
    )

    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserResponse.from_user(current_user, full=True),
    )


@router.put("/privacy", response_model=PreferencesResponse)
async def update_privacy(
    body: PreferencesUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update notification preferences and privacy flags"""
    values = flatten_update(body.model_dump(exclude_unset=True), PRIVACY_FIELD_MAP)
    apply_updates(current_user, values)
    await db.commit()

    return PreferencesResponse(
        message="Privacy settings updated successfully",
        preferences=preferences_from_user(current_user),
    )


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if not verify_password(body.current_password, current_user.hashed_password):
        logger.log_auth_event(
            event="password_change",
            success=False,
            user_email=current_user.email,
            reason="Current password is incorrect"
        )
        raise ValidationError("Current password is incorrect", field="current_password")

    current_user.hashed_password = get_password_hash(body.new_password)
    await db.commit()

    logger.log_auth_event(event="password_change", success=True, user_email=current_user.email)
    return MessageResponse(message="Password updated successfully")


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    body: AccountDelete,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Soft delete: anonymize email/phone and deactivate"""
    if not verify_password(body.password, current_user.hashed_password):
        raise ValidationError("Incorrect password", field="password")

    prefix = f"deleted_{int(time.time() * 1000)}_"
    original_email = current_user.email
    current_user.email = f"{prefix}{current_user.email}"
    if current_user.phone:
        current_user.phone = f"{prefix}{current_user.phone}"
    current_user.is_active = False
    current_user.membership_status = MembershipStatus.INACTIVE
    await db.commit()

    logger.log_auth_event(event="account_delete", success=True, user_email=original_email)
    return MessageResponse(message="Account deleted successfully")
