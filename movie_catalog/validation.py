"""Entity validation for movie payloads.

Validation runs the strict pydantic models from `models` and turns every
reported error into a short human-readable message. All violations are kept,
in field-declaration order, and joined with ", " so existing consumers keep
seeing the same response text, e.g.:

    String must contain at least 1 character(s), Number must be greater than or equal to 1900

Failures are returned, not raised; the service decides what to do with them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .models import MovieCreate, MovieUpdate


@dataclass(frozen=True)
class ValidationFailure:
    messages: list[str]

    @property
    def message(self) -> str:
        return ", ".join(self.messages)


def validate_create(data: Any) -> MovieCreate | ValidationFailure:
    try:
        return MovieCreate.model_validate(data)
    except ValidationError as e:
        return ValidationFailure([_describe(err) for err in e.errors()])


def validate_update(data: Any) -> MovieUpdate | ValidationFailure:
    try:
        return MovieUpdate.model_validate(data)
    except ValidationError as e:
        return ValidationFailure([_describe(err) for err in e.errors()])


def _kind(value: Any) -> str:
    """Name a JSON value's primitive kind."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _describe(err: dict[str, Any]) -> str:
    kind = err["type"]
    ctx = err.get("ctx") or {}
    value = err.get("input")

    if kind == "missing":
        return "Required"
    if kind == "string_too_short":
        return f"String must contain at least {ctx['min_length']} character(s)"
    if kind == "greater_than_equal":
        return f"Number must be greater than or equal to {ctx['ge']}"
    if kind == "greater_than":
        return f"Number must be greater than {ctx['gt']}"
    if kind == "less_than_equal":
        return f"Number must be less than or equal to {ctx['le']}"
    if kind == "string_type":
        return f"Expected string, received {_kind(value)}"
    if kind in ("int_type", "int_from_float"):
        if isinstance(value, float):
            return "Expected integer, received float"
        return f"Expected number, received {_kind(value)}"
    if kind == "float_type":
        return f"Expected number, received {_kind(value)}"
    if kind in ("model_type", "model_attributes_type", "dict_type"):
        return f"Expected object, received {_kind(value)}"
    return err["msg"]
