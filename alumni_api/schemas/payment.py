from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from alumni_api.models.payment import Payment, PaymentType, PaymentStatus, PaymentMethod
from alumni_api.schemas.common import Pagination


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    type: PaymentType
    purpose: Optional[str] = Field(None, max_length=500)
    payment_method: PaymentMethod


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    transaction_id: Optional[str] = Field(None, max_length=255)


class PaymentResponse(BaseModel):
    id: str
    user_id: str
    amount: float
    currency: str
    type: PaymentType
    purpose: Optional[str] = None
    status: PaymentStatus
    payment_method: PaymentMethod
    transaction_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentResponse":
        return cls(
            id=str(payment.id),
            user_id=str(payment.user_id),
            amount=payment.amount,
            currency=payment.currency,
            type=payment.type,
            purpose=payment.purpose,
            status=payment.status,
            payment_method=payment.payment_method,
            transaction_id=payment.transaction_id,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )


class PaymentListResponse(BaseModel):
    items: List[PaymentResponse]
    pagination: Pagination


class PaymentMutationResponse(BaseModel):
    message: str
    payment: PaymentResponse
