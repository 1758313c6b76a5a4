from typing import Optional, Dict, Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import (
    AuthorizationError,
    BusinessRuleError,
    EventNotFoundError,
    ValidationError,
)
from alumni_api.core.logging_config import logger
from alumni_api.core.types import utcnow, to_naive_utc
from alumni_api.models.event import Event, EventAttendee, EventType, EventStatus, AttendeeStatus
from alumni_api.models.user import User, UserRole
from alumni_api.modules.auth.dependencies import (
    get_current_user,
    get_optional_user,
    require_roles,
    ensure_owner_or_admin,
)
from alumni_api.schemas.common import MessageResponse
from alumni_api.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventListResponse,
    EventMutationResponse,
    RSVPResponse,
    AttendeeDetail,
    AttendeesResponse,
    MyRegistration,
    MyRegistrationsResponse,
    ReminderRequest,
    ReminderResponse,
    EVENT_FIELD_MAP,
)
from alumni_api.services.notification_service import (
    NotificationService,
    get_notification_service,
    notify_users,
)
from alumni_api.utils.pagination import paginate
from alumni_api.utils.updates import flatten_update, apply_updates
from alumni_api.utils.validation import validate_payload

router = APIRouter()

DATE_COLUMNS = ("start_date", "end_date", "registration_deadline")


async def get_event_or_404(db: AsyncSession, event_id: str) -> Event:
    """Load an event with organizer and attendees, refreshing any cached copy"""
    result = await db.execute(
        select(Event)
        .where(Event.id == event_id)
        .execution_options(populate_existing=True)
    )
    event = result.scalar_one_or_none()
    if not event:
        raise EventNotFoundError(event_id)
    return event


def check_date_order(start, end) -> None:
    if end <= start:
        raise ValidationError("End date must be after start date", field="date.end")


@router.get("", response_model=EventListResponse)
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    type: Optional[EventType] = Query(None),
    status: Optional[EventStatus] = Query(None),
    upcoming: bool = Query(False),
    search: Optional[str] = Query(None, max_length=100),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Public events, soonest first; only published unless ``status`` is given"""
    query = select(Event).where(
        Event.is_public == True,  # noqa: E712
        Event.status == (status or EventStatus.PUBLISHED),
    )

    if type:
        query = query.where(Event.type == type)
    if upcoming:
        query = query.where(Event.start_date >= utcnow())
    if search:
        query = query.where(or_(
            Event.title.icontains(search, autoescape=True),
            Event.description.icontains(search, autoescape=True),
            Event.venue.icontains(search, autoescape=True),
            Event.city.icontains(search, autoescape=True),
        ))

    query = query.order_by(Event.start_date.asc())
    events, pagination = await paginate(db, query, page, limit)

    return EventListResponse(
        items=[EventResponse.from_event(e) for e in events],
        pagination=pagination,
    )


@router.get("/my/registrations", response_model=MyRegistrationsResponse)
async def my_registrations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Events the caller has RSVP'd to"""
    result = await db.execute(
        select(EventAttendee)
        .where(EventAttendee.user_id == current_user.id)
        .options(selectinload(EventAttendee.event))
        .order_by(EventAttendee.registered_at.desc())
    )
    registrations = [MyRegistration.from_attendee(a) for a in result.scalars().all()]
    return MyRegistrationsResponse(registrations=registrations, total_count=len(registrations))


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    event = await get_event_or_404(db, event_id)

    if not event.is_public and (viewer is None or viewer.role != UserRole.ADMIN):
        raise AuthorizationError("Access denied to private event")

    return EventResponse.from_event(event, include_attendees=True)


@router.post("", response_model=EventMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.MODERATOR, UserRole.ALUMNI)),
    db: AsyncSession = Depends(get_db)
):
    start = to_naive_utc(body.date.start)
    end = to_naive_utc(body.date.end)
    check_date_order(start, end)

    event = Event(
        title=body.title,
        description=body.description,
        type=body.type,
        start_date=start,
        end_date=end,
        location_type=body.location.type,
        venue=body.location.venue,
        address=body.location.address,
        city=body.location.city,
        country=body.location.country,
        virtual_link=body.location.virtual_link,
        organizer_id=current_user.id,
        capacity=body.capacity,
        registration_required=body.registration.is_required,
        registration_deadline=to_naive_utc(body.registration.deadline),
        fee_amount=body.registration.fee.amount,
        fee_currency=body.registration.fee.currency,
        tags=body.tags,
        is_public=body.is_public,
        status=body.status,
        image_url=body.image_url,
    )
    db.add(event)
    await db.commit()

    event = await get_event_or_404(db, event.id)
    logger.info(
        f"Event created: {event.title}",
        extra={"event_type": "event_created", "event_id": str(event.id)}
    )

    return EventMutationResponse(message="Event created successfully", event=EventResponse.from_event(event))


@router.put("/{event_id}", response_model=EventMutationResponse)
async def update_event(
    event_id: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Partial update; organizer or admin only"""
    event = await get_event_or_404(db, event_id)
    ensure_owner_or_admin(current_user, event.organizer_id, "update this event")

    body = validate_payload(EventUpdate, payload)
    values = flatten_update(body.model_dump(exclude_unset=True), EVENT_FIELD_MAP)
    for column in DATE_COLUMNS:
        if column in values:
            values[column] = to_naive_utc(values[column])

    if "start_date" in values or "end_date" in values:
        check_date_order(
            values.get("start_date", event.start_date),
            values.get("end_date", event.end_date),
        )

    apply_updates(event, values)
    await db.commit()

    event = await get_event_or_404(db, event_id)
    return EventMutationResponse(message="Event updated successfully", event=EventResponse.from_event(event))


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    event = await get_event_or_404(db, event_id)
    ensure_owner_or_admin(current_user, event.organizer_id, "delete this event")

    await db.delete(event)
    await db.commit()

    logger.info(
        f"Event deleted: {event_id}",
        extra={"event_type": "event_deleted", "event_id": event_id}
    )
    return MessageResponse(message="Event deleted successfully")


@router.post("/{event_id}/rsvp", response_model=RSVPResponse)
async def rsvp(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    event = await get_event_or_404(db, event_id)

    if event.status != EventStatus.PUBLISHED:
        raise BusinessRuleError("Cannot RSVP to unpublished event")

    if event.registration_deadline and utcnow() > event.registration_deadline:
        raise BusinessRuleError("Registration deadline has passed")

    # Not atomic: two concurrent RSVPs at the boundary can both pass
    if event.capacity and event.attendee_count >= event.capacity:
        raise BusinessRuleError("Event is full")

    if any(str(a.user_id) == str(current_user.id) for a in event.attendees):
        raise BusinessRuleError("Already registered for this event")

    event.attendees.append(EventAttendee(user_id=current_user.id, status=AttendeeStatus.REGISTERED))
    await db.commit()

    event = await get_event_or_404(db, event_id)
    return RSVPResponse(message="Successfully registered for event", attendee_count=event.attendee_count)


@router.delete("/{event_id}/rsvp", response_model=RSVPResponse)
async def cancel_rsvp(
    event_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    event = await get_event_or_404(db, event_id)

    attendee = next((a for a in event.attendees if str(a.user_id) == str(current_user.id)), None)
    if attendee is None:
        raise BusinessRuleError("Not registered for this event")

    event.attendees.remove(attendee)
    await db.commit()

    event = await get_event_or_404(db, event_id)
    return RSVPResponse(message="RSVP cancelled successfully", attendee_count=event.attendee_count)


@router.get(
    "/{event_id}/attendees",
    response_model=AttendeesResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.MODERATOR))],
)
async def get_attendees(event_id: str, db: AsyncSession = Depends(get_db)):
    event = await get_event_or_404(db, event_id)
    return AttendeesResponse(
        attendees=[AttendeeDetail.from_attendee(a) for a in event.attendees],
        total_count=event.attendee_count,
    )


@router.post("/{event_id}/send-reminders", response_model=ReminderResponse)
async def send_reminders(
    event_id: str,
    body: ReminderRequest,
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.MODERATOR)),
    notifier: NotificationService = Depends(get_notification_service),
    db: AsyncSession = Depends(get_db)
):
    """Notify registered attendees by email and/or SMS"""
    event = await get_event_or_404(db, event_id)

    attendees = [
        a.user for a in event.attendees
        if a.status == AttendeeStatus.REGISTERED and a.user.is_active
    ]
    if not attendees:
        raise BusinessRuleError("No registered attendees to notify")

    when = event.start_date.strftime("%Y-%m-%d %H:%M UTC")
    results = await notify_users(
        notifier,
        attendees,
        body.type,
        message=f"{event.title}\nDate: {when}\n\n{body.message}",
        subject=f"Reminder: {event.title}",
        sms_message=f"Reminder: {event.title} on {event.start_date:%Y-%m-%d}. {body.message}",
    )

    logger.info(
        f"Reminders sent for event {event_id}",
        extra={
            "event_type": "event_reminders",
            "event_id": event_id,
            "channel": body.type.value,
            "sent_by": str(current_user.id),
        }
    )
    return ReminderResponse(message="Reminders sent successfully", results=results)
