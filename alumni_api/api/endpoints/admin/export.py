"""
Admin Data Export endpoint - JSON or CSV attachment downloads.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.database import get_db
from alumni_api.core.logging_config import logger
from alumni_api.models import User, Event, Payment, PaymentStatus
from alumni_api.modules.auth.dependencies import get_current_admin
from alumni_api.schemas.admin import ExportType, ExportFormat
from alumni_api.utils.export import (
    USER_EXPORT_FIELDS,
    EVENT_EXPORT_FIELDS,
    PAYMENT_EXPORT_FIELDS,
    user_row,
    event_row,
    payment_row,
    render_csv,
    render_json,
    export_filename,
)

router = APIRouter()


async def load_rows(db: AsyncSession, export_type: ExportType):
    if export_type == ExportType.USERS:
        result = await db.execute(
            select(User).where(User.is_active == True).order_by(User.created_at.desc())  # noqa: E712
        )
        return [user_row(u) for u in result.scalars().all()], USER_EXPORT_FIELDS

    if export_type == ExportType.EVENTS:
        result = await db.execute(select(Event).order_by(Event.start_date.desc()))
        return [event_row(e) for e in result.scalars().all()], EVENT_EXPORT_FIELDS

    result = await db.execute(
        select(Payment).where(Payment.status == PaymentStatus.COMPLETED).order_by(Payment.created_at.desc())
    )
    return [payment_row(p) for p in result.scalars().all()], PAYMENT_EXPORT_FIELDS


@router.get("/{export_type}")
async def export_data(
    export_type: ExportType,
    format: ExportFormat = Query(ExportFormat.JSON),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Export active users, all events or completed payments"""
    rows, fields = await load_rows(db, export_type)

    if format == ExportFormat.CSV:
        content = render_csv(rows, fields)
        media_type = "text/csv"
    else:
        content = render_json(rows)
        media_type = "application/json"

    filename = export_filename(export_type.value, format.value)
    logger.log_admin_action(
        admin_id=str(current_admin.id),
        action=f"exported {len(rows)} rows of",
        target_type=export_type.value,
        export_format=format.value,
    )

    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
