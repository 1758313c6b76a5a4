from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import PaymentNotFoundError
from alumni_api.core.logging_config import logger
from alumni_api.models.payment import Payment, PaymentStatus
from alumni_api.models.user import User
from alumni_api.modules.auth.dependencies import get_current_user, get_current_admin
from alumni_api.schemas.payment import (
    PaymentCreate,
    PaymentStatusUpdate,
    PaymentResponse,
    PaymentListResponse,
    PaymentMutationResponse,
)
from alumni_api.utils.pagination import paginate

router = APIRouter()


@router.post("", response_model=PaymentMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    body: PaymentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Record a pending payment for the caller"""
    payment = Payment(
        user_id=current_user.id,
        amount=body.amount,
        currency=body.currency.upper(),
        type=body.type,
        purpose=body.purpose,
        status=PaymentStatus.PENDING,
        payment_method=body.payment_method,
    )
    db.add(payment)
    await db.commit()
    await db.refresh(payment)

    logger.info(
        f"Payment recorded: {payment.amount} {payment.currency} ({payment.type.value})",
        extra={"event_type": "payment_created", "payment_id": str(payment.id)}
    )
    return PaymentMutationResponse(message="Payment recorded successfully", payment=PaymentResponse.from_payment(payment))


@router.get("/my", response_model=PaymentListResponse)
async def my_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = (
        select(Payment)
        .where(Payment.user_id == current_user.id)
        .order_by(Payment.created_at.desc())
    )
    payments, pagination = await paginate(db, query, page, limit)
    return PaymentListResponse(items=[PaymentResponse.from_payment(p) for p in payments], pagination=pagination)


@router.put("/{payment_id}/status", response_model=PaymentMutationResponse)
async def update_payment_status(
    payment_id: str,
    body: PaymentStatusUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if not payment:
        raise PaymentNotFoundError(payment_id)

    payment.status = body.status
    if body.transaction_id is not None:
        payment.transaction_id = body.transaction_id
    await db.commit()

    logger.log_admin_action(
        admin_id=str(admin.id),
        action=f"set status {body.status.value}",
        target_type="payment",
        target_id=payment_id,
    )
    return PaymentMutationResponse(message="Payment status updated", payment=PaymentResponse.from_payment(payment))
