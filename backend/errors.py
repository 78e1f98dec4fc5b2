"""
Concrete Station Approval - Service Exceptions
Version: 1.0.0

Changelog:
v1.0.0 (2026-09-28): Initial exception hierarchy

Services raise these; the API layer maps them to HTTP status codes
(NotFound -> 404, ValidationError -> 400, TransactionConflict -> 409).
"""

from typing import Any, Optional, Type, TypeVar

import pydantic

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


class StationApprovalError(Exception):
    """Base exception for all station approval errors."""

    pass


class NotFound(StationApprovalError):
    """A referenced station, visit, payment or setting does not exist."""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class ValidationError(StationApprovalError):
    """Malformed payload or an operation not allowed in the current state."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        invalid_value: Any = None,
    ):
        self.field = field
        self.invalid_value = invalid_value

        error_parts = [message]
        if field:
            error_parts.append(f"Field: {field}")
        if invalid_value is not None:
            error_parts.append(f"Value: {invalid_value}")

        super().__init__(" | ".join(error_parts))


class TransactionConflict(StationApprovalError):
    """The write lock could not be acquired; the caller should retry once."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        if original_error:
            message = f"{message} (Original error: {original_error})"
        super().__init__(message)


def parse_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """Validate a raw payload, raising ValidationError instead of pydantic's"""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(
            f"Invalid {model.__name__}: {first['msg']}",
            field=field,
            invalid_value=None if first["type"] == "missing" else first.get("input"),
        ) from e
