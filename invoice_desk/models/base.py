"""
Shared helpers for the entity schemas.

Provides identifier and timestamp generation plus the conversion of pydantic
validation failures into flat lists of field errors.
"""
from __future__ import annotations
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, TypeVar
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..errors import FieldError, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def new_id() -> str:
    """Generate a fresh record identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_timestamp(previous: datetime | None) -> datetime:
    """
    Return a timestamp strictly greater than ``previous``.

    Two writes within the same clock tick still get distinct, increasing
    update timestamps.
    """
    now = utcnow()
    if previous is None:
        return now
    if previous.tzinfo is None:
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "__root__"


def to_field_errors(exc: PydanticValidationError) -> list[FieldError]:
    """Flatten a pydantic validation error into field errors."""
    return [FieldError(_field_path(err["loc"]), err["msg"]) for err in exc.errors()]


def collect_errors(model_cls: type[BaseModel], data: Mapping[str, Any]) -> list[FieldError]:
    """
    Validate ``data`` against ``model_cls`` and return every problem found.

    Returns an empty list when the data is valid.
    """
    try:
        model_cls.model_validate(data)
    except PydanticValidationError as e:
        return to_field_errors(e)
    return []


def load_model(model_cls: type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Build a model instance, raising our ``ValidationError`` on failure.

    Raises:
        ValidationError: With all field errors of the record
    """
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(to_field_errors(e)) from e
