"""
Custom Exceptions for the Alumni Network API
============================================

Route handlers raise these instead of building HTTP responses by hand. The
handler registered in ``alumni_api.main`` turns them into JSON:

    {"detail": "<message>", "code": "<CODE>", "details": {...}}

Usage:
    from alumni_api.core.exceptions import EventNotFoundError, BusinessRuleError

    if not event:
        raise EventNotFoundError(event_id)

    if event.status != EventStatus.PUBLISHED:
        raise BusinessRuleError("Cannot RSVP to unpublished event")
"""

from typing import Optional, Any, Dict, List


class AlumniNetworkError(Exception):
    """Base exception for all Alumni Network errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "code": self.code,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(AlumniNetworkError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair did not match"""

    def __init__(self):
        super().__init__("Invalid credentials")
        self.code = "INVALID_CREDENTIALS"


class AuthorizationError(AlumniNetworkError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, code="ACCESS_DENIED")


class InactiveAccountError(AuthorizationError):
    """Account has been deactivated or deleted"""

    def __init__(self):
        super().__init__("User account is inactive")
        self.code = "ACCOUNT_INACTIVE"


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(AlumniNetworkError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str = "", message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str = ""):
        super().__init__("User", user_id)


class EventNotFoundError(ResourceNotFoundError):
    def __init__(self, event_id: str = ""):
        super().__init__("Event", event_id)


class AnnouncementNotFoundError(ResourceNotFoundError):
    def __init__(self, announcement_id: str = ""):
        super().__init__("Announcement", announcement_id)


class CommentNotFoundError(ResourceNotFoundError):
    def __init__(self, comment_id: str = ""):
        super().__init__("Comment", comment_id)


class ReplyNotFoundError(ResourceNotFoundError):
    def __init__(self, reply_id: str = ""):
        super().__init__("Reply", reply_id)


class JobNotFoundError(ResourceNotFoundError):
    def __init__(self, job_id: str = "", message: Optional[str] = None):
        super().__init__("Job", job_id, message=message)


class ApplicationNotFoundError(ResourceNotFoundError):
    def __init__(self, application_id: str = ""):
        super().__init__("Application", application_id)


class PaymentNotFoundError(ResourceNotFoundError):
    def __init__(self, payment_id: str = ""):
        super().__init__("Payment", payment_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(AlumniNetworkError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class PayloadValidationError(ValidationError):
    """A request body failed schema validation after the handler accepted it"""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__("Validation failed")
        self.details = {"errors": errors}

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "errors": self.details["errors"]}


class BusinessRuleError(AlumniNetworkError):
    """A domain rule rejected the request (duplicate RSVP, deadline passed, ...)"""

    status_code = 400

    def __init__(self, message: str, code: str = "BUSINESS_RULE_VIOLATION"):
        super().__init__(message, code=code)


class DuplicateEmailError(BusinessRuleError):
    def __init__(self):
        super().__init__("Email already registered", code="EMAIL_EXISTS")


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic/FastAPI error entries to ``{"field", "message"}`` pairs"""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return formatted
