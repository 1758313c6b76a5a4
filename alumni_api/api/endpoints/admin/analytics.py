"""
Admin Analytics endpoint - time series and breakdowns for the dashboard charts.
"""
from collections import OrderedDict
from datetime import timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.database import get_db
from alumni_api.core.types import utcnow
from alumni_api.models import User, Event, Payment, PaymentStatus
from alumni_api.modules.auth.dependencies import get_current_admin
from alumni_api.schemas.admin import (
    AnalyticsResponse,
    UserAnalytics,
    PaymentAnalytics,
    EventAnalytics,
    GrowthPoint,
    YearCount,
    MonthlyRevenue,
    TypeRevenue,
)
from alumni_api.api.endpoints.admin.dashboard import rows_to_counts

router = APIRouter()

REVENUE_MONTHS = 12


def month_keys(now, months: int) -> list:
    """``months`` YYYY-MM keys ending with the current month, oldest first"""
    keys = []
    year, month = now.year, now.month
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(keys))


@router.get("", response_model=AnalyticsResponse)
async def get_analytics(
    days: int = Query(30, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    now = utcnow()
    today = now.date()
    since = now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=days - 1)

    # Daily signups, zero-filled
    signup_dates = (await db.execute(
        select(User.created_at).where(User.created_at >= since)
    )).scalars().all()
    daily = OrderedDict(
        ((today - timedelta(days=offset)).isoformat(), 0) for offset in range(days - 1, -1, -1)
    )
    for created_at in signup_dates:
        key = created_at.date().isoformat()
        if key in daily:
            daily[key] += 1

    by_year = (await db.execute(
        select(User.graduation_year, func.count(User.id))
        .where(User.is_active == True, User.graduation_year.isnot(None))  # noqa: E712
        .group_by(User.graduation_year)
        .order_by(User.graduation_year)
    )).all()

    # Completed revenue per month
    months = month_keys(now, REVENUE_MONTHS)
    monthly = OrderedDict((key, {"revenue": 0.0, "transactions": 0}) for key in months)
    completed = (await db.execute(
        select(Payment.created_at, Payment.amount).where(Payment.status == PaymentStatus.COMPLETED)
    )).all()
    for created_at, amount in completed:
        key = created_at.strftime("%Y-%m")
        if key in monthly:
            monthly[key]["revenue"] += float(amount or 0)
            monthly[key]["transactions"] += 1

    by_type = (await db.execute(
        select(Payment.type, func.coalesce(func.sum(Payment.amount), 0), func.count(Payment.id))
        .where(Payment.status == PaymentStatus.COMPLETED)
        .group_by(Payment.type)
    )).all()

    average_transaction = await db.scalar(
        select(func.avg(Payment.amount)).where(Payment.status == PaymentStatus.COMPLETED)
    )
    total_payments = await db.scalar(select(func.count(Payment.id))) or 0
    refunded = await db.scalar(
        select(func.count(Payment.id)).where(Payment.status == PaymentStatus.REFUNDED)
    ) or 0
    refund_rate = round(refunded / total_payments * 100, 2) if total_payments else 0.0

    events_by_type = await db.execute(select(Event.type, func.count(Event.id)).group_by(Event.type))

    return AnalyticsResponse(
        days=days,
        users=UserAnalytics(
            growth_data=[GrowthPoint(date=d, count=c) for d, c in daily.items()],
            by_graduation_year=[YearCount(year=y, count=c) for y, c in by_year],
        ),
        payments=PaymentAnalytics(
            monthly_revenue=[
                MonthlyRevenue(month=m, revenue=round(v["revenue"], 2), transactions=v["transactions"])
                for m, v in monthly.items()
            ],
            by_type=[
                TypeRevenue(type=t.value if hasattr(t, "value") else str(t), revenue=float(total), count=count)
                for t, total, count in by_type
            ],
            average_transaction=round(float(average_transaction or 0), 2),
            refund_rate=refund_rate,
        ),
        events=EventAnalytics(by_type=rows_to_counts(events_by_type.all())),
    )
