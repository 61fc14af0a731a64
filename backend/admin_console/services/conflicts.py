from __future__ import annotations
from typing import Any, Iterable, Optional, Sequence

from admin_console.constants.roles import ROLE_NAME_ALIASES

DUPLICATE_MESSAGE_MARKERS = ('already', 'duplicate', 'exists')


def normalize_name(name: Optional[str]) -> str:
    return (name or '').strip().lower()


def _role_field(role: Any, field: str):
    if isinstance(role, dict):
        return role.get(field)
    return getattr(role, field, None)


def is_duplicate_name_message(message: Optional[str]) -> bool:
    """True when a backend error message reads like a name collision."""
    text = (message or '').lower()
    return any(marker in text for marker in DUPLICATE_MESSAGE_MARKERS)


class RoleConflictResolver:
    """Decides whether a role name collides with an existing role.

    Alias groups name distinct roles that still count as the same identity
    for uniqueness (``admin`` and ``super admin`` by default).
    """

    def __init__(self, aliases: Iterable[Sequence[str]] = ROLE_NAME_ALIASES):
        self.aliases = [frozenset(normalize_name(n) for n in group) for group in aliases]

    def names_conflict(self, a: str, b: str) -> bool:
        na, nb = normalize_name(a), normalize_name(b)
        if na == nb:
            return True
        return any(na in group and nb in group for group in self.aliases)

    def find_conflict(self, candidate_name: str, existing_roles: Iterable[Any], excluding_role_id: Any = None):
        for role in existing_roles:
            if excluding_role_id is not None and str(_role_field(role, 'id')) == str(excluding_role_id):
                continue
            if self.names_conflict(candidate_name, _role_field(role, 'name')):
                return role
        return None

    def conflicts_with(self, candidate_name: str, existing_roles: Iterable[Any], excluding_role_id: Any = None) -> bool:
        return self.find_conflict(candidate_name, existing_roles, excluding_role_id) is not None


__all__ = ['RoleConflictResolver', 'normalize_name', 'is_duplicate_name_message']
