"""
Unit Tests for the exception hierarchy and error formatting
"""
from alumni_api.core.exceptions import (
    AuthenticationError,
    InactiveAccountError,
    EventNotFoundError,
    JobNotFoundError,
    ValidationError,
    PayloadValidationError,
    BusinessRuleError,
    DuplicateEmailError,
    format_validation_errors,
)


class TestStatusCodes:

    def test_status_codes(self):
        assert AuthenticationError().status_code == 401
        assert InactiveAccountError().status_code == 403
        assert EventNotFoundError("e1").status_code == 404
        assert ValidationError("bad").status_code == 400
        assert BusinessRuleError("Event is full").status_code == 400
        assert DuplicateEmailError().status_code == 400


class TestErrorBodies:

    def test_not_found_body(self):
        body = EventNotFoundError("e1").to_dict()

        assert body == {
            "detail": "Event not found",
            "code": "EVENT_NOT_FOUND",
            "details": {"resource_type": "Event", "resource_id": "e1"},
        }

    def test_not_found_custom_message(self):
        error = JobNotFoundError("j1", message="Job not available")

        assert error.to_dict()["detail"] == "Job not available"

    def test_validation_error_field(self):
        body = ValidationError("start_date must be before end_date", field="start_date").to_dict()

        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"] == {"field": "start_date"}

    def test_payload_validation_body(self):
        errors = [{"field": "priority", "message": "Input should be 'low', 'medium', 'high' or 'urgent'"}]

        assert PayloadValidationError(errors).to_dict() == {"detail": "Validation failed", "errors": errors}


class TestFormatValidationErrors:

    def test_strips_location_prefixes(self):
        errors = [
            {"loc": ("body", "company", "name"), "msg": "Field required"},
            {"loc": ("query", "type"), "msg": "Input should be a valid enumeration member"},
        ]

        assert format_validation_errors(errors) == [
            {"field": "company.name", "message": "Field required"},
            {"field": "type", "message": "Input should be a valid enumeration member"},
        ]

    def test_model_level_error_maps_to_body(self):
        errors = [{"loc": ("body",), "msg": "Value error, Subject is required for email notifications"}]

        assert format_validation_errors(errors)[0]["field"] == "body"

    def test_list_index_in_location(self):
        errors = [{"loc": ("body", "audience", "roles", 0), "msg": "Input should be 'alumni'"}]

        assert format_validation_errors(errors)[0]["field"] == "audience.roles.0"
