from __future__ import annotations

from typing import Any


class ValidationError(ValueError):
    """400-level input problem."""


def require_json_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def require_str(data: dict, key: str, message: str | None = None) -> str:
    """Trimmed non-blank string field, else ValidationError."""
    value = data.get(key)
    if value is None or isinstance(value, (dict, list, bool)):
        raise ValidationError(message or f"Missing {key}.")
    s = str(value).strip()
    if not s:
        raise ValidationError(message or f"Missing {key}.")
    return s


def optional_choice(data: dict, key: str, choices, default: str) -> str:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    s = str(value).strip().lower()
    if s not in choices:
        raise ValidationError(f"{key} must be one of: {', '.join(choices)}")
    return s
