from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, JSON
import enum

from alumni_api.core.database import Base
from alumni_api.core.types import GUID, generate_uuid, utcnow


class UserRole(str, enum.Enum):
    """User roles"""
    ALUMNI = "alumni"
    ADMIN = "admin"
    MODERATOR = "moderator"


class MembershipStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class User(Base):
    """Alumni network member"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(80), nullable=True)
    hashed_password = Column(String(255), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.ALUMNI, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    membership_status = Column(SQLEnum(MembershipStatus), default=MembershipStatus.ACTIVE, nullable=False)
    avatar_url = Column(Text, nullable=True)
    is_email_verified = Column(Boolean, default=False)
    is_phone_verified = Column(Boolean, default=False)

    # Profile fields
    graduation_year = Column(Integer, nullable=True, index=True)
    degree = Column(String(255), nullable=True)
    major = Column(String(255), nullable=True)
    profession = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    location_city = Column(String(255), nullable=True)
    location_country = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    profile_picture = Column(Text, nullable=True)
    social_links = Column(JSON, default=dict)  # linkedin, twitter, facebook, website
    skills = Column(JSON, default=list)
    interests = Column(JSON, default=list)

    # Preferences
    email_notifications = Column(Boolean, default=True, nullable=False)
    sms_notifications = Column(Boolean, default=True, nullable=False)
    push_notifications = Column(Boolean, default=True, nullable=False)
    show_email = Column(Boolean, default=False, nullable=False)
    show_phone = Column(Boolean, default=False, nullable=False)
    show_location = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    last_login = Column(DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<User {self.email}>"
