from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, JSON,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from alumni_api.core.database import Base
from alumni_api.core.types import GUID, generate_uuid, utcnow


class AnnouncementCategory(str, enum.Enum):
    GENERAL = "general"
    JOBS = "jobs"
    NEWS = "news"
    SCHOLARSHIPS = "scholarships"
    EVENTS = "events"
    ACHIEVEMENTS = "achievements"
    OBITUARY = "obituary"


class AnnouncementPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class AnnouncementStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Announcement(Base):
    """News post with likes and threaded comments"""
    __tablename__ = "announcements"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    category = Column(SQLEnum(AnnouncementCategory), nullable=False, index=True)
    priority = Column(SQLEnum(AnnouncementPriority), default=AnnouncementPriority.MEDIUM, nullable=False)
    status = Column(SQLEnum(AnnouncementStatus), default=AnnouncementStatus.PUBLISHED, nullable=False, index=True)
    publish_date = Column(DateTime, default=utcnow, nullable=False)
    expiry_date = Column(DateTime, nullable=True)
    is_pinned = Column(Boolean, default=False, nullable=False)
    image_url = Column(Text, nullable=True)

    # Target audience
    is_public = Column(Boolean, default=True, nullable=False)
    target_graduation_years = Column(JSON, default=list)
    target_roles = Column(JSON, default=list)

    views = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    author = relationship("User", lazy="selectin")
    likes = relationship(
        "AnnouncementLike",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AnnouncementLike.created_at",
    )
    comments = relationship(
        "AnnouncementComment",
        back_populates="announcement",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AnnouncementComment.created_at",
    )

    def __repr__(self):
        return f"<Announcement {self.title}>"


class AnnouncementLike(Base):
    __tablename__ = "announcement_likes"
    __table_args__ = (
        UniqueConstraint("announcement_id", "user_id", name="uq_announcement_like"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    announcement_id = Column(GUID, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", lazy="selectin")


class AnnouncementComment(Base):
    __tablename__ = "announcement_comments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    announcement_id = Column(GUID, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    announcement = relationship("Announcement", back_populates="comments")
    user = relationship("User", lazy="selectin")
    replies = relationship(
        "CommentReply",
        back_populates="comment",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CommentReply.created_at",
    )


class CommentReply(Base):
    __tablename__ = "comment_replies"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    comment_id = Column(GUID, ForeignKey("announcement_comments.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    comment = relationship("AnnouncementComment", back_populates="replies")
    user = relationship("User", lazy="selectin")
