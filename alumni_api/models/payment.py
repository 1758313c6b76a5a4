from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Float, ForeignKey
from sqlalchemy.orm import relationship
import enum

from alumni_api.core.database import Base
from alumni_api.core.types import GUID, generate_uuid, utcnow


class PaymentType(str, enum.Enum):
    MEMBERSHIP = "membership"
    DONATION = "donation"
    EVENT_TICKET = "event_ticket"
    MERCHANDISE = "merchandise"
    OTHER = "other"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    HORMUUD = "hormuud"
    ZAAD = "zaad"
    PAYPAL = "paypal"


class Payment(Base):
    """Membership fee, donation or ticket payment"""
    __tablename__ = "payments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), default="USD", nullable=False)
    type = Column(SQLEnum(PaymentType), nullable=False, index=True)
    purpose = Column(String(500), nullable=True)
    status = Column(SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    transaction_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", lazy="selectin")

    def __repr__(self):
        return f"<Payment {self.amount} {self.currency} ({self.status})>"
