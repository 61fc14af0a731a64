from __future__ import annotations
"""Input checks shared by the role console and the HTTP layer.

Failures raise ``ValidationError`` so they surface before any repository call.
"""
from typing import Any, Optional

from admin_console.errors import ValidationError

ROLE_NAME_MAX_LENGTH = 64


def require_role_name(name: Optional[str]) -> str:
    """Return the trimmed role name or raise when it is empty."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Please enter a role name')
    clean = name.strip()
    if len(clean) > ROLE_NAME_MAX_LENGTH:
        raise ValidationError(f'Role name must be at most {ROLE_NAME_MAX_LENGTH} characters')
    return clean


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a boolean')
    return value

__all__ = ['require_role_name', 'require_bool']
