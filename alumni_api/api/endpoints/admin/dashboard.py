"""
Admin Dashboard endpoint - independent aggregate reads merged into one document.
"""
from datetime import datetime, timedelta
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import ValidationError
from alumni_api.core.types import utcnow, to_naive_utc
from alumni_api.models import (
    User,
    Event,
    EventStatus,
    Payment,
    PaymentStatus,
    Announcement,
    AnnouncementStatus,
    Job,
    JobStatus,
)
from alumni_api.modules.auth.dependencies import get_current_admin
from alumni_api.schemas.admin import (
    DashboardResponse,
    DashboardPeriod,
    UserStats,
    EventStats,
    PaymentStats,
    AnnouncementStats,
    JobStats,
    RecentUser,
    RecentEvent,
)

router = APIRouter()

DEFAULT_WINDOW_DAYS = 30


def rows_to_counts(rows) -> Dict[str, int]:
    """``[(enum_or_str, count), ...]`` -> ``{"value": count}``"""
    counts = {}
    for key, count in rows:
        if key is None:
            continue
        counts[key.value if hasattr(key, "value") else str(key)] = count
    return counts


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Dashboard KPIs; the window defaults to the last 30 days"""
    now = utcnow()
    end = to_naive_utc(end_date) or now
    start = to_naive_utc(start_date) or end - timedelta(days=DEFAULT_WINDOW_DAYS)
    if start > end:
        raise ValidationError("start_date must be before end_date", field="start_date")

    recent_limit = settings.DASHBOARD_RECENT_LIMIT

    # User stats
    total_users = await db.scalar(select(func.count(User.id)).where(User.is_active == True))  # noqa: E712
    new_users = await db.scalar(
        select(func.count(User.id)).where(
            User.is_active == True,  # noqa: E712
            User.created_at >= start,
            User.created_at <= end,
        )
    )
    users_by_role = await db.execute(
        select(User.role, func.count(User.id)).where(User.is_active == True).group_by(User.role)  # noqa: E712
    )
    recent_users = (await db.execute(
        select(User).where(User.is_active == True).order_by(User.created_at.desc()).limit(recent_limit)  # noqa: E712
    )).scalars().all()

    # Event stats
    total_events = await db.scalar(select(func.count(Event.id)))
    upcoming_events = await db.scalar(
        select(func.count(Event.id)).where(
            Event.start_date >= now,
            Event.status == EventStatus.PUBLISHED,
        )
    )
    events_by_type = await db.execute(select(Event.type, func.count(Event.id)).group_by(Event.type))
    recent_events = (await db.execute(
        select(Event).order_by(Event.created_at.desc()).limit(recent_limit)
    )).scalars().all()

    # Revenue stats
    total_revenue = await db.scalar(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(Payment.status == PaymentStatus.COMPLETED)
    )
    revenue_in_period = await db.scalar(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.status == PaymentStatus.COMPLETED,
            Payment.created_at >= start,
            Payment.created_at <= end,
        )
    )

    # Announcement stats
    total_announcements = await db.scalar(
        select(func.count(Announcement.id)).where(Announcement.status == AnnouncementStatus.PUBLISHED)
    )
    announcements_by_category = await db.execute(
        select(Announcement.category, func.count(Announcement.id))
        .where(Announcement.status == AnnouncementStatus.PUBLISHED)
        .group_by(Announcement.category)
    )

    # Job stats
    active_jobs = await db.scalar(select(func.count(Job.id)).where(Job.status == JobStatus.ACTIVE))
    jobs_by_category = await db.execute(
        select(Job.category, func.count(Job.id))
        .where(Job.status == JobStatus.ACTIVE)
        .group_by(Job.category)
    )

    return DashboardResponse(
        period=DashboardPeriod(start_date=start, end_date=end),
        users=UserStats(
            total=total_users or 0,
            new_in_period=new_users or 0,
            by_role=rows_to_counts(users_by_role.all()),
            recent=[
                RecentUser(
                    id=str(u.id),
                    first_name=u.first_name,
                    last_name=u.last_name,
                    email=u.email,
                    role=u.role,
                    created_at=u.created_at,
                )
                for u in recent_users
            ],
        ),
        events=EventStats(
            total=total_events or 0,
            upcoming=upcoming_events or 0,
            by_type=rows_to_counts(events_by_type.all()),
            recent=[
                RecentEvent(
                    id=str(e.id),
                    title=e.title,
                    type=e.type.value,
                    start_date=e.start_date,
                    status=e.status.value,
                    organizer={
                        "id": str(e.organizer.id),
                        "first_name": e.organizer.first_name,
                        "last_name": e.organizer.last_name,
                    } if e.organizer else None,
                    created_at=e.created_at,
                )
                for e in recent_events
            ],
        ),
        payments=PaymentStats(
            total_revenue=float(total_revenue or 0),
            revenue_in_period=float(revenue_in_period or 0),
        ),
        announcements=AnnouncementStats(
            total=total_announcements or 0,
            by_category=rows_to_counts(announcements_by_category.all()),
        ),
        jobs=JobStats(
            total_active=active_jobs or 0,
            by_category=rows_to_counts(jobs_by_category.all()),
        ),
    )
