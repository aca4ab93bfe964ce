from __future__ import annotations

from .errors import InvalidInput


# PUBLIC_INTERFACE
def require_text(value: str, field_name: str) -> str:
    """
    Strip surrounding whitespace and reject non-string or empty values.

    Raises InvalidInput, a ValueError, so pydantic validators can call this too.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field_name} must be a non-empty string")
    return value.strip()
