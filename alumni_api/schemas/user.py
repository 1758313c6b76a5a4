from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from alumni_api.models.user import User, UserRole, MembershipStatus
from alumni_api.schemas.common import Pagination


# ============================================
# Nested profile / preference objects
# ============================================

class LocationSchema(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None


class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    website: Optional[str] = None


class ProfileSchema(BaseModel):
    graduation_year: Optional[int] = None
    degree: Optional[str] = None
    major: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    location: Optional[LocationSchema] = None
    bio: Optional[str] = None
    profile_picture: Optional[str] = None
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)


class PrivacySchema(BaseModel):
    show_email: bool = False
    show_phone: bool = False
    show_location: bool = True


class PreferencesSchema(BaseModel):
    email_notifications: bool = True
    sms_notifications: bool = True
    push_notifications: bool = True
    privacy: PrivacySchema = Field(default_factory=PrivacySchema)


# ============================================
# Responses
# ============================================

class UserResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole
    is_active: bool
    membership_status: MembershipStatus
    avatar_url: Optional[str] = None
    is_email_verified: bool = False
    is_phone_verified: bool = False
    profile: ProfileSchema
    preferences: Optional[PreferencesSchema] = None
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User, viewer: Optional[User] = None, full: bool = False) -> "UserResponse":
        """
        Build the public representation of ``user`` as seen by ``viewer``.

        Email, phone and location are only shown when the owner allows it,
        unless the viewer is the owner or an admin (or ``full`` is set).
        Preferences are only returned to those privileged viewers.
        """
        privileged = full or (
            viewer is not None
            and (str(viewer.id) == str(user.id) or viewer.role == UserRole.ADMIN)
        )
        show_email = privileged or bool(user.show_email)
        show_phone = privileged or bool(user.show_phone)
        show_location = privileged or bool(user.show_location)

        location = None
        if show_location and (user.location_city or user.location_country):
            location = LocationSchema(city=user.location_city, country=user.location_country)

        profile = ProfileSchema(
            graduation_year=user.graduation_year,
            degree=user.degree,
            major=user.major,
            profession=user.profession,
            company=user.company,
            location=location,
            bio=user.bio,
            profile_picture=user.profile_picture,
            social_links=SocialLinks(**(user.social_links or {})),
            skills=user.skills or [],
            interests=user.interests or [],
        )

        preferences = None
        if privileged:
            preferences = preferences_from_user(user)

        return cls(
            id=str(user.id),
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email if show_email else None,
            phone=user.phone if show_phone else None,
            role=user.role,
            is_active=user.is_active,
            membership_status=user.membership_status,
            avatar_url=user.avatar_url,
            is_email_verified=bool(user.is_email_verified),
            is_phone_verified=bool(user.is_phone_verified),
            profile=profile,
            preferences=preferences,
            last_login=user.last_login,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


def preferences_from_user(user: User) -> PreferencesSchema:
    return PreferencesSchema(
        email_notifications=user.email_notifications,
        sms_notifications=user.sms_notifications,
        push_notifications=user.push_notifications,
        privacy=PrivacySchema(
            show_email=user.show_email,
            show_phone=user.show_phone,
            show_location=user.show_location,
        ),
    )


class UserListResponse(BaseModel):
    items: List[UserResponse]
    pagination: Pagination


class PreferencesResponse(BaseModel):
    message: str
    preferences: PreferencesSchema


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserResponse


# ============================================
# Requests
# ============================================

class LocationUpdate(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None


class SocialLinksUpdate(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    website: Optional[str] = None


class ProfileFieldsUpdate(BaseModel):
    graduation_year: Optional[int] = Field(None, ge=1900, le=2100)
    degree: Optional[str] = None
    major: Optional[str] = None
    profession: Optional[str] = None
    company: Optional[str] = None
    location: Optional[LocationUpdate] = None
    bio: Optional[str] = Field(None, max_length=2000)
    profile_picture: Optional[str] = None
    social_links: Optional[SocialLinksUpdate] = None
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=40)
    avatar_url: Optional[str] = None
    profile: Optional[ProfileFieldsUpdate] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Name cannot be empty")
        return v


class PrivacyUpdate(BaseModel):
    show_email: Optional[bool] = None
    show_phone: Optional[bool] = None
    show_location: Optional[bool] = None


class PreferencesUpdate(BaseModel):
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    push_notifications: Optional[bool] = None
    privacy: Optional[PrivacyUpdate] = None


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class AccountDelete(BaseModel):
    password: str = Field(..., min_length=1)
