# haccp_review/services/common/mapping.py
"""
Input coercion helpers.

Services accept either a validated schema instance or a plain mapping;
mappings are validated here so every entry point reports the same
``ValidationError``.
"""
from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

TSchema = TypeVar("TSchema", bound=BaseModel)


def coerce_input(data: Union[TSchema, Mapping[str, Any]], schema_cls: Type[TSchema]) -> TSchema:
    """
    Validate ``data`` against ``schema_cls``.

    Raises:
        ValidationError: With the offending fields listed under ``details["errors"]``
    """
    if isinstance(data, schema_cls):
        return data
    try:
        return schema_cls.model_validate(data)
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid {schema_cls.__name__}: {first.get('msg', 'validation failed')}",
            field=field,
            details={"errors": errors},
        ) from exc
