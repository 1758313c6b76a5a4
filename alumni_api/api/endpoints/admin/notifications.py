"""
Admin Bulk Communication endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import select, or_, false
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.database import get_db
from alumni_api.core.exceptions import BusinessRuleError
from alumni_api.core.logging_config import logger
from alumni_api.models.user import User
from alumni_api.modules.auth.dependencies import get_current_admin
from alumni_api.schemas.admin import Audience, BulkNotificationRequest, BulkNotificationResponse
from alumni_api.services.notification_service import (
    NotificationService,
    get_notification_service,
    notify_users,
)

router = APIRouter()


def audience_query(audience: Audience):
    """Active users matching every audience criterion that was given"""
    query = select(User).where(User.is_active == True)  # noqa: E712
    if audience.all:
        return query
    if not (audience.roles or audience.graduation_years or audience.locations):
        return query.where(false())

    if audience.roles:
        query = query.where(User.role.in_(audience.roles))
    if audience.graduation_years:
        query = query.where(User.graduation_year.in_(audience.graduation_years))
    if audience.locations:
        query = query.where(or_(*[User.location_city.icontains(loc, autoescape=True) for loc in audience.locations]))
    return query


@router.post("/bulk", response_model=BulkNotificationResponse)
async def send_bulk_notification(
    body: BulkNotificationRequest,
    notifier: NotificationService = Depends(get_notification_service),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    recipients = (await db.execute(audience_query(body.audience))).scalars().all()
    if not recipients:
        raise BusinessRuleError("No recipients match the selected audience")

    results = await notify_users(
        notifier,
        recipients,
        body.type,
        message=body.message,
        subject=body.subject,
    )

    logger.log_admin_action(
        admin_id=str(current_admin.id),
        action=f"sent bulk {body.type.value} notification to",
        target_type="users",
        recipients=len(recipients),
    )
    return BulkNotificationResponse(
        message="Notifications sent successfully",
        recipients=len(recipients),
        results=results,
    )
