from pydantic import BaseModel
from typing import Optional
import enum


class NotificationChannel(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"
    BOTH = "both"


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(BaseModel):
    message: str


class UserSummary(BaseModel):
    """Populated user reference"""
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_user(cls, user, include_email: bool = False) -> "UserSummary":
        return cls(
            id=str(user.id),
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email if include_email else None,
            avatar_url=user.avatar_url,
        )


class DeliveryResult(BaseModel):
    successful: int = 0
    failed: int = 0


class DeliveryResults(BaseModel):
    email: Optional[DeliveryResult] = None
    sms: Optional[DeliveryResult] = None
