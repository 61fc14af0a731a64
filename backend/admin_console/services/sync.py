"""Live identity state and the policy that keeps it in step with role edits.

``IdentityContext`` is the one holder of the authenticated actor's role and
cached grants. Writers: ``login``/``logout`` for the session lifecycle, and
``RoleSyncPolicy.apply`` when the actor edits their own role.
"""
from __future__ import annotations
import logging
from typing import Any, Mapping, Optional

from admin_console.constants.modules import ModuleCatalog
from admin_console.services.conflicts import normalize_name
from admin_console.services.matrix import (
    PermissionMatrix, RawMatrix, coerce_matrix, empty_matrix, has_capability, normalize,
)

logger = logging.getLogger(__name__)


class IdentityContext:
    def __init__(self, role: Optional[str] = None, permissions: Any = None,
                 catalog: Optional[ModuleCatalog] = None):
        self.catalog = catalog
        self.role: Optional[str] = None
        self._live: PermissionMatrix = empty_matrix(catalog)
        if role is not None:
            self.login(role, permissions)

    @classmethod
    def from_claims(cls, claims: Optional[Mapping[str, Any]], catalog: Optional[ModuleCatalog] = None) -> 'IdentityContext':
        claims = claims or {}
        role = claims.get('role')
        if not role:
            return cls(catalog=catalog)
        return cls(role=role, permissions=claims.get('perms'), catalog=catalog)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.role)

    @property
    def live_permissions(self) -> PermissionMatrix:
        return dict(self._live)

    # Alias used by authorization checks
    permissions = live_permissions

    def login(self, role: str, permissions: Any = None):
        self.role = role
        self._live = dict(coerce_matrix(permissions, self.catalog))

    def logout(self):
        self.role = None
        self._live = empty_matrix(self.catalog)

    def can(self, module_key: str, capability: str) -> bool:
        return has_capability(self._live, module_key, capability, self.catalog)

    def _replace_live_permissions(self, matrix: RawMatrix):
        self._live = dict(normalize(matrix, self.catalog))


class RoleSyncPolicy:
    def should_sync_live_identity(self, edited_role_name: Optional[str], identity: Optional[IdentityContext]) -> bool:
        if identity is None or not identity.is_authenticated:
            return False
        edited = normalize_name(edited_role_name)
        return bool(edited) and edited == normalize_name(identity.role)

    def apply(self, edited_role_name: Optional[str], saved_matrix: RawMatrix, identity: Optional[IdentityContext],
              new_name: Optional[str] = None) -> bool:
        """Refresh the identity's grants when it holds the edited role.

        ``edited_role_name`` is the role's name before the edit; ``new_name``
        follows a rename so later edits keep matching.
        """
        if not self.should_sync_live_identity(edited_role_name, identity):
            return False
        identity._replace_live_permissions(saved_matrix)
        if new_name and new_name.strip():
            identity.role = new_name.strip()
        logger.info('Live permissions refreshed for role %s', identity.role)
        return True


def should_sync_live_identity(edited_role_name: Optional[str], identity: Optional[IdentityContext]) -> bool:
    return RoleSyncPolicy().should_sync_live_identity(edited_role_name, identity)


__all__ = ['IdentityContext', 'RoleSyncPolicy', 'should_sync_live_identity']
