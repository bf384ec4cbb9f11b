from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from hrms.core.errors import ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part != "__root__"]
    return ".".join(parts) or "body"


def _clean_message(message: str) -> str:
    # pydantic prefixes custom validator errors with "Value error, ".
    prefix = "Value error, "
    if message.startswith(prefix):
        return message[len(prefix):]
    return message


def errors_to_details(exc: ValidationError) -> dict[str, str]:
    """Collapse pydantic errors into a field -> first message map."""
    details: dict[str, str] = {}
    for error in exc.errors():
        field = _field_name(tuple(error.get("loc", ())))
        details.setdefault(field, _clean_message(error.get("msg", "Invalid value")))
    return details


def validate_body(model: Type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data if isinstance(data, dict) else {})
    except ValidationError as exc:
        raise ValidationFailed(errors_to_details(exc)) from exc
