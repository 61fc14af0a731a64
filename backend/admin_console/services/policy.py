from __future__ import annotations
import logging
from typing import Any, Dict, List

from flask_jwt_extended import get_jwt

from admin_console.constants.roles import PROTECTED_ROLE_NAMES
from admin_console.errors import DeletionForbiddenError
from admin_console.services import matrix
from admin_console.services.conflicts import normalize_name

logger = logging.getLogger(__name__)


def current_permissions() -> List[Dict[str, Any]]:
    claims = get_jwt()
    return list(claims.get('perms', []))


def has_capability(module_key: str, capability: str) -> bool:
    return matrix.has_capability(current_permissions(), module_key, capability)


def _role_name(role: Any) -> str:
    if isinstance(role, str):
        return role
    if isinstance(role, dict):
        return role.get('name') or ''
    return getattr(role, 'name', '') or ''


def is_protected_role(role: Any) -> bool:
    return normalize_name(_role_name(role)) in PROTECTED_ROLE_NAMES


def can_delete(role: Any) -> bool:
    """Admin roles can never be deleted, whatever path the request takes."""
    return not is_protected_role(role)


def assert_can_delete(role: Any):
    if not can_delete(role):
        logger.info('Refused deletion of protected role %r', _role_name(role))
        raise DeletionForbiddenError('Admin role cannot be deleted')
