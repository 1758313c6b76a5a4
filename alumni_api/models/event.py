from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, JSON, Float,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from alumni_api.core.database import Base
from alumni_api.core.types import GUID, generate_uuid, utcnow


class EventType(str, enum.Enum):
    REUNION = "reunion"
    WEBINAR = "webinar"
    FUNDRAISER = "fundraiser"
    NETWORKING = "networking"
    WORKSHOP = "workshop"
    SOCIAL = "social"
    OTHER = "other"


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class LocationType(str, enum.Enum):
    PHYSICAL = "physical"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"


class AttendeeStatus(str, enum.Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


class Event(Base):
    """Alumni event with RSVPs"""
    __tablename__ = "events"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    type = Column(SQLEnum(EventType), nullable=False, index=True)

    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)

    # Location
    location_type = Column(SQLEnum(LocationType), nullable=False)
    venue = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True)
    country = Column(String(255), nullable=True)
    virtual_link = Column(Text, nullable=True)

    organizer_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    capacity = Column(Integer, nullable=True)  # null = unlimited

    # Registration
    registration_required = Column(Boolean, default=False, nullable=False)
    registration_deadline = Column(DateTime, nullable=True)
    fee_amount = Column(Float, default=0)
    fee_currency = Column(String(10), default="USD")

    tags = Column(JSON, default=list)
    is_public = Column(Boolean, default=True, nullable=False)
    status = Column(SQLEnum(EventStatus), default=EventStatus.PUBLISHED, nullable=False, index=True)
    image_url = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    organizer = relationship("User", lazy="selectin")
    attendees = relationship(
        "EventAttendee",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="EventAttendee.registered_at",
    )

    @property
    def attendee_count(self) -> int:
        return sum(1 for a in self.attendees if a.status != AttendeeStatus.CANCELLED)

    def __repr__(self):
        return f"<Event {self.title}>"


class EventAttendee(Base):
    """RSVP of a user against an event"""
    __tablename__ = "event_attendees"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_attendee"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    event_id = Column(GUID, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SQLEnum(AttendeeStatus), default=AttendeeStatus.REGISTERED, nullable=False)
    registered_at = Column(DateTime, default=utcnow, nullable=False)

    event = relationship("Event", back_populates="attendees")
    user = relationship("User", lazy="selectin")
