"""
Boundary validation of incoming request payloads.

The presentation layer hands raw JSON bodies to validate_request(); the core
only ever receives the typed request models from models/*.py.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from exceptions.common import ValidationException

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def validate_request(model: type[RequestModel], payload: dict[str, Any] | None) -> RequestModel:
    """
    Validate a raw payload into a typed request model.

    Raises:
        ValidationException: With the offending fields in details['errors']
    """
    try:
        return model.model_validate(payload or {})
    except ValidationError as e:
        errors = [
            {'field': '.'.join(str(part) for part in error['loc']), 'message': error['msg']}
            for error in e.errors()
        ]
        fields = ', '.join(error['field'] or '<root>' for error in errors)
        raise ValidationException(
            f"Invalid {model.__name__}: {fields}",
            details={'errors': errors}
        ) from e
