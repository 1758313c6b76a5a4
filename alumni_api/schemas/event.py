from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from alumni_api.models.event import Event, EventAttendee, EventType, EventStatus, LocationType, AttendeeStatus
from alumni_api.schemas.common import Pagination, UserSummary, NotificationChannel, DeliveryResults


# ============================================
# Nested objects
# ============================================

class EventDate(BaseModel):
    start: datetime
    end: datetime


class EventLocation(BaseModel):
    type: LocationType
    venue: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    virtual_link: Optional[str] = None


class Fee(BaseModel):
    amount: float = Field(0, ge=0)
    currency: str = "USD"


class Registration(BaseModel):
    is_required: bool = False
    deadline: Optional[datetime] = None
    fee: Fee = Field(default_factory=Fee)


# ============================================
# Requests
# ============================================

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    type: EventType
    date: EventDate
    location: EventLocation
    capacity: Optional[int] = Field(None, ge=1)
    registration: Registration = Field(default_factory=Registration)
    tags: List[str] = Field(default_factory=list)
    is_public: bool = True
    status: EventStatus = EventStatus.PUBLISHED
    image_url: Optional[str] = None


class EventDateUpdate(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class EventLocationUpdate(BaseModel):
    type: Optional[LocationType] = None
    venue: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    virtual_link: Optional[str] = None


class FeeUpdate(BaseModel):
    amount: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None


class RegistrationUpdate(BaseModel):
    is_required: Optional[bool] = None
    deadline: Optional[datetime] = None
    fee: Optional[FeeUpdate] = None


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    type: Optional[EventType] = None
    date: Optional[EventDateUpdate] = None
    location: Optional[EventLocationUpdate] = None
    capacity: Optional[int] = Field(None, ge=1)
    registration: Optional[RegistrationUpdate] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None
    status: Optional[EventStatus] = None
    image_url: Optional[str] = None


# Nested request keys -> flattened Event columns
EVENT_FIELD_MAP = {
    "date.start": "start_date",
    "date.end": "end_date",
    "location.type": "location_type",
    "location.venue": "venue",
    "location.address": "address",
    "location.city": "city",
    "location.country": "country",
    "location.virtual_link": "virtual_link",
    "registration.is_required": "registration_required",
    "registration.deadline": "registration_deadline",
    "registration.fee.amount": "fee_amount",
    "registration.fee.currency": "fee_currency",
}


class ReminderRequest(BaseModel):
    type: NotificationChannel
    message: str = Field(..., min_length=1, max_length=1600)


# ============================================
# Responses
# ============================================

class AttendeeResponse(BaseModel):
    id: str
    user: UserSummary
    status: AttendeeStatus
    registered_at: datetime

    @classmethod
    def from_attendee(cls, attendee: EventAttendee) -> "AttendeeResponse":
        return cls(
            id=str(attendee.id),
            user=UserSummary.from_user(attendee.user),
            status=attendee.status,
            registered_at=attendee.registered_at,
        )


class EventResponse(BaseModel):
    id: str
    title: str
    description: str
    type: EventType
    date: EventDate
    location: EventLocation
    organizer: UserSummary
    capacity: Optional[int] = None
    registration: Registration
    tags: List[str] = Field(default_factory=list)
    is_public: bool
    status: EventStatus
    image_url: Optional[str] = None
    attendee_count: int = 0
    attendees: Optional[List[AttendeeResponse]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_event(cls, event: Event, include_attendees: bool = False) -> "EventResponse":
        attendees = None
        if include_attendees:
            attendees = [AttendeeResponse.from_attendee(a) for a in event.attendees]

        return cls(
            id=str(event.id),
            title=event.title,
            description=event.description,
            type=event.type,
            date=EventDate(start=event.start_date, end=event.end_date),
            location=EventLocation(
                type=event.location_type,
                venue=event.venue,
                address=event.address,
                city=event.city,
                country=event.country,
                virtual_link=event.virtual_link,
            ),
            organizer=UserSummary.from_user(event.organizer, include_email=True),
            capacity=event.capacity,
            registration=Registration(
                is_required=bool(event.registration_required),
                deadline=event.registration_deadline,
                fee=Fee(amount=event.fee_amount or 0, currency=event.fee_currency or "USD"),
            ),
            tags=event.tags or [],
            is_public=event.is_public,
            status=event.status,
            image_url=event.image_url,
            attendee_count=event.attendee_count,
            attendees=attendees,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )


class EventListResponse(BaseModel):
    items: List[EventResponse]
    pagination: Pagination


class EventMutationResponse(BaseModel):
    message: str
    event: EventResponse


class RSVPResponse(BaseModel):
    message: str
    attendee_count: int


class AttendeeUser(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    graduation_year: Optional[int] = None


class AttendeeDetail(BaseModel):
    id: str
    user: AttendeeUser
    status: AttendeeStatus
    registered_at: datetime

    @classmethod
    def from_attendee(cls, attendee: EventAttendee) -> "AttendeeDetail":
        user = attendee.user
        return cls(
            id=str(attendee.id),
            user=AttendeeUser(
                id=str(user.id),
                first_name=user.first_name,
                last_name=user.last_name,
                email=user.email,
                phone=user.phone,
                graduation_year=user.graduation_year,
            ),
            status=attendee.status,
            registered_at=attendee.registered_at,
        )


class AttendeesResponse(BaseModel):
    attendees: List[AttendeeDetail]
    total_count: int


class EventSummary(BaseModel):
    id: str
    title: str
    type: EventType
    date: EventDate
    location: EventLocation
    status: EventStatus


class MyRegistration(BaseModel):
    event: EventSummary
    status: AttendeeStatus
    registered_at: datetime

    @classmethod
    def from_attendee(cls, attendee: EventAttendee) -> "MyRegistration":
        event = attendee.event
        return cls(
            event=EventSummary(
                id=str(event.id),
                title=event.title,
                type=event.type,
                date=EventDate(start=event.start_date, end=event.end_date),
                location=EventLocation(
                    type=event.location_type,
                    venue=event.venue,
                    address=event.address,
                    city=event.city,
                    country=event.country,
                    virtual_link=event.virtual_link,
                ),
                status=event.status,
            ),
            status=attendee.status,
            registered_at=attendee.registered_at,
        )


class MyRegistrationsResponse(BaseModel):
    registrations: List[MyRegistration]
    total_count: int


class ReminderResponse(BaseModel):
    message: str
    results: DeliveryResults
