# Re-export all models for convenient imports
from alumni_api.models.user import User, UserRole, MembershipStatus
from alumni_api.models.event import Event, EventAttendee, EventType, EventStatus, LocationType, AttendeeStatus
from alumni_api.models.announcement import (
    Announcement,
    AnnouncementLike,
    AnnouncementComment,
    CommentReply,
    AnnouncementCategory,
    AnnouncementPriority,
    AnnouncementStatus,
)
from alumni_api.models.job import (
    Job,
    JobApplication,
    JobType,
    JobCategory,
    ExperienceLevel,
    ApplicationMethod,
    JobStatus,
    ApplicationStatus,
)
from alumni_api.models.payment import Payment, PaymentType, PaymentStatus, PaymentMethod

__all__ = [
    # User
    "User",
    "UserRole",
    "MembershipStatus",
    # Events
    "Event",
    "EventAttendee",
    "EventType",
    "EventStatus",
    "LocationType",
    "AttendeeStatus",
    # Announcements
    "Announcement",
    "AnnouncementLike",
    "AnnouncementComment",
    "CommentReply",
    "AnnouncementCategory",
    "AnnouncementPriority",
    "AnnouncementStatus",
    # Jobs
    "Job",
    "JobApplication",
    "JobType",
    "JobCategory",
    "ExperienceLevel",
    "ApplicationMethod",
    "JobStatus",
    "ApplicationStatus",
    # Payments
    "Payment",
    "PaymentType",
    "PaymentStatus",
    "PaymentMethod",
]
