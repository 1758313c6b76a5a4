"""Row builders and file rendering for the admin data export"""
import csv
import io
import json
from datetime import datetime
from typing import Any, Dict, Iterable, List

from alumni_api.core.types import utcnow
from alumni_api.models import User, Event, Payment


USER_EXPORT_FIELDS = [
    "id", "first_name", "last_name", "email", "phone", "role", "graduation_year",
    "degree", "profession", "company", "city", "country", "membership_status", "created_at",
]

EVENT_EXPORT_FIELDS = [
    "id", "title", "type", "status", "start_date", "end_date", "location_type",
    "city", "country", "capacity", "attendee_count", "organizer_email", "created_at",
]

PAYMENT_EXPORT_FIELDS = [
    "id", "user_email", "amount", "currency", "type", "purpose", "status",
    "payment_method", "transaction_id", "created_at",
]


def _value(value: Any) -> Any:
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def user_row(user: User) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "phone": user.phone,
        "role": _value(user.role),
        "graduation_year": user.graduation_year,
        "degree": user.degree,
        "profession": user.profession,
        "company": user.company,
        "city": user.location_city,
        "country": user.location_country,
        "membership_status": _value(user.membership_status),
        "created_at": _value(user.created_at),
    }


def event_row(event: Event) -> Dict[str, Any]:
    return {
        "id": str(event.id),
        "title": event.title,
        "type": _value(event.type),
        "status": _value(event.status),
        "start_date": _value(event.start_date),
        "end_date": _value(event.end_date),
        "location_type": _value(event.location_type),
        "city": event.city,
        "country": event.country,
        "capacity": event.capacity,
        "attendee_count": event.attendee_count,
        "organizer_email": event.organizer.email if event.organizer else None,
        "created_at": _value(event.created_at),
    }


def payment_row(payment: Payment) -> Dict[str, Any]:
    return {
        "id": str(payment.id),
        "user_email": payment.user.email if payment.user else None,
        "amount": payment.amount,
        "currency": payment.currency,
        "type": _value(payment.type),
        "purpose": payment.purpose,
        "status": _value(payment.status),
        "payment_method": _value(payment.payment_method),
        "transaction_id": payment.transaction_id,
        "created_at": _value(payment.created_at),
    }


def render_csv(rows: Iterable[Dict[str, Any]], fields: List[str]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return output.getvalue()


def render_json(rows: List[Dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2, default=str)


def export_filename(export_type: str, extension: str) -> str:
    return f"{export_type}_export_{utcnow().strftime('%Y%m%d_%H%M%S')}.{extension}"
