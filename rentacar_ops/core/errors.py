"""Business error types raised by the service layer.

Three categories are distinguished: invalid input or rule violations,
missing records, and insufficient roles. Each carries the HTTP status code an
outer API layer should answer with, so one shared handler can map them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


class RentacarError(Exception):
    """Base class for all business errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": self.message}


class ValidationError(RentacarError):
    """Invalid input shape or business rule violation.

    Attributes:
        field_errors: Optional mapping of dotted field path to error messages.
    """

    status_code = 400

    def __init__(self, message: str, field_errors: Optional[Dict[str, List[str]]] = None) -> None:
        super().__init__(message)
        self.field_errors = field_errors

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.field_errors:
            payload["field_errors"] = self.field_errors
        return payload


class NotFoundError(RentacarError):
    """The requested record does not exist."""

    status_code = 404


class PermissionDeniedError(RentacarError):
    """The acting user's role is not high enough."""

    status_code = 403


def field_errors_from_pydantic(exc: PydanticValidationError) -> Dict[str, List[str]]:
    """Flatten a pydantic validation error into ``{"a.b": [messages]}``.

    Model-level validators report an empty location; those land under ``""``
    unless the validator raised with an explicit field location.
    """
    field_errors: Dict[str, List[str]] = {}
    for issue in exc.errors():
        path = ".".join(str(part) for part in issue.get("loc", ()))
        field_errors.setdefault(path, []).append(issue.get("msg", "invalid value"))
    return field_errors


def validation_error_from_pydantic(
    exc: PydanticValidationError, message: str = "Input contains invalid values"
) -> ValidationError:
    """Wrap a pydantic validation error as a business ``ValidationError``."""
    return ValidationError(message, field_errors_from_pydantic(exc))


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_input(model_cls: Type[ModelT], data: Any) -> ModelT:
    """
    Validate raw service input against ``model_cls``.

    Already validated instances pass through unchanged.

    Raises:
        ValidationError: The input does not satisfy the model.
    """
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as exc:
        raise validation_error_from_pydantic(exc) from exc
