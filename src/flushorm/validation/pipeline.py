"""
Validation pipeline run by persisters before INSERT and UPDATE.

Values restored from rows or written through setters bypass the field
descriptor checks, so constraints are re-checked here against whatever the
entity currently holds.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.entity import Entity
from ..core.fields import Field, StringField
from .errors import ValidationError


def validate_instance(instance: Entity) -> None:
    errors: Dict[str, List[str]] = {}

    for field in instance._meta.get_fields():
        field_name = field.require_name()
        value = field.value_from(instance)
        for message in _field_errors(field, value):
            _add_error(errors, field_name, message)

    try:
        instance.clean()
    except ValidationError as exc:
        _merge_errors(errors, exc.errors)
    except ValueError as exc:
        _add_error(errors, "__all__", str(exc))

    if errors:
        raise ValidationError(errors)


def _field_errors(field: Field, value: Any) -> List[str]:
    if value is None:
        if field.generated or field.nullable:
            return []
        return ["This field cannot be null."]

    messages: List[str] = []
    if isinstance(field, StringField) and field.max_length and len(str(value)) > field.max_length:
        messages.append(f"Ensure this value has at most {field.max_length} characters.")
    if field.choices and value not in field.choices:
        messages.append(f"Value {value!r} is not a valid choice.")
    for validator in field.validators:
        try:
            validator(value)
        except (ValueError, TypeError) as exc:
            messages.append(str(exc))
    return messages


def _add_error(errors: Dict[str, List[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def _merge_errors(target: Dict[str, List[str]], source: Dict[str, List[str]]) -> None:
    for field, messages in source.items():
        target.setdefault(field, []).extend(messages)
