from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from alumni_api.models.announcement import (
    Announcement,
    AnnouncementComment,
    CommentReply,
    AnnouncementCategory,
    AnnouncementPriority,
    AnnouncementStatus,
)
from alumni_api.models.user import UserRole
from alumni_api.schemas.common import Pagination, UserSummary


class TargetAudience(BaseModel):
    is_public: bool = True
    graduation_years: List[int] = Field(default_factory=list)
    roles: List[UserRole] = Field(default_factory=list)


class TargetAudienceUpdate(BaseModel):
    is_public: Optional[bool] = None
    graduation_years: Optional[List[int]] = None
    roles: Optional[List[UserRole]] = None


class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    category: AnnouncementCategory
    priority: AnnouncementPriority = AnnouncementPriority.MEDIUM
    status: AnnouncementStatus = AnnouncementStatus.PUBLISHED
    publish_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    is_pinned: bool = False
    image_url: Optional[str] = None
    target_audience: TargetAudience = Field(default_factory=TargetAudience)


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[AnnouncementCategory] = None
    priority: Optional[AnnouncementPriority] = None
    status: Optional[AnnouncementStatus] = None
    publish_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    is_pinned: Optional[bool] = None
    image_url: Optional[str] = None
    target_audience: Optional[TargetAudienceUpdate] = None


ANNOUNCEMENT_FIELD_MAP = {
    "target_audience.is_public": "is_public",
    "target_audience.graduation_years": "target_graduation_years",
    "target_audience.roles": "target_roles",
}


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment content is required")
        return v


class ReplyCreate(BaseModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reply content is required")
        return v


class ReplyResponse(BaseModel):
    id: str
    user: UserSummary
    content: str
    created_at: datetime

    @classmethod
    def from_reply(cls, reply: CommentReply) -> "ReplyResponse":
        return cls(
            id=str(reply.id),
            user=UserSummary.from_user(reply.user),
            content=reply.content,
            created_at=reply.created_at,
        )


class CommentResponse(BaseModel):
    id: str
    user: UserSummary
    content: str
    created_at: datetime
    replies: List[ReplyResponse] = Field(default_factory=list)

    @classmethod
    def from_comment(cls, comment: AnnouncementComment) -> "CommentResponse":
        return cls(
            id=str(comment.id),
            user=UserSummary.from_user(comment.user),
            content=comment.content,
            created_at=comment.created_at,
            replies=[ReplyResponse.from_reply(r) for r in comment.replies],
        )


class LikeEntry(BaseModel):
    user: UserSummary
    created_at: datetime


class AnnouncementResponse(BaseModel):
    id: str
    title: str
    content: str
    author: UserSummary
    category: AnnouncementCategory
    priority: AnnouncementPriority
    status: AnnouncementStatus
    publish_date: datetime
    expiry_date: Optional[datetime] = None
    is_pinned: bool
    image_url: Optional[str] = None
    target_audience: TargetAudience
    views: int
    like_count: int
    comment_count: int
    likes: Optional[List[LikeEntry]] = None
    comments: Optional[List[CommentResponse]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_announcement(cls, announcement: Announcement, detailed: bool = False) -> "AnnouncementResponse":
        likes = comments = None
        if detailed:
            likes = [
                LikeEntry(user=UserSummary.from_user(like.user), created_at=like.created_at)
                for like in announcement.likes
            ]
            comments = [CommentResponse.from_comment(c) for c in announcement.comments]

        return cls(
            id=str(announcement.id),
            title=announcement.title,
            content=announcement.content,
            author=UserSummary.from_user(announcement.author, include_email=True),
            category=announcement.category,
            priority=announcement.priority,
            status=announcement.status,
            publish_date=announcement.publish_date,
            expiry_date=announcement.expiry_date,
            is_pinned=announcement.is_pinned,
            image_url=announcement.image_url,
            target_audience=TargetAudience(
                is_public=announcement.is_public,
                graduation_years=announcement.target_graduation_years or [],
                roles=announcement.target_roles or [],
            ),
            views=announcement.views or 0,
            like_count=len(announcement.likes),
            comment_count=len(announcement.comments),
            likes=likes,
            comments=comments,
            created_at=announcement.created_at,
            updated_at=announcement.updated_at,
        )


class AnnouncementListResponse(BaseModel):
    items: List[AnnouncementResponse]
    pagination: Pagination


class AnnouncementMutationResponse(BaseModel):
    message: str
    announcement: AnnouncementResponse


class LikeResponse(BaseModel):
    message: str
    liked: bool
    like_count: int


class CommentMutationResponse(BaseModel):
    message: str
    comment: CommentResponse


class ReplyMutationResponse(BaseModel):
    message: str
    reply: ReplyResponse
