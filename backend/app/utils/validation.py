from __future__ import annotations
"""Validation helpers shared by routes and the record store."""
from typing import Any, Iterable
from flask import abort

from app.constants.workflow import ALL_STATUSES
from app.errors import InvalidStateError, ValidationError


def validate_status(new_status: str, allowed: Iterable[str] = ALL_STATUSES, field_name: str = 'status') -> str:
    """Return new_status when it is one of `allowed`; InvalidStateError otherwise."""
    if new_status not in tuple(allowed):
        raise InvalidStateError(f"{field_name} '{new_status}' invalid")
    return new_status


def require_json_object(data: Any) -> dict:
    """Request bodies are objects; arrays and scalars are a 400 on `body`."""
    if not isinstance(data, dict):
        raise ValidationError({'body': 'JSON object expected'})
    return data


def optional_str(data, name: str) -> str:
    """Stripped string value of `name`, '' when absent; ValidationError for other types."""
    value = data.get(name)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise ValidationError({name: 'must be a string'})
    return value.strip()


def require_json_fields(data: dict, *names: str) -> dict:
    data = require_json_object(data)
    missing = [n for n in names if not str(data.get(n) or '').strip()]
    if missing:
        abort(400, description=f"{', '.join(missing)} required")
    return data

__all__ = ['validate_status', 'require_json_object', 'optional_str', 'require_json_fields']
