from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from alumni_api.core.exceptions import PayloadValidationError, format_validation_errors

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate a raw request body inside a handler.

    Used by update endpoints, which check ownership before looking at the body.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise PayloadValidationError(format_validation_errors(e.errors()))
