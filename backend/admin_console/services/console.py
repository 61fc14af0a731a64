"""Roles screen controller.

Holds the locally known role list and the editing identity, validates edits
before they reach the repository, and keeps the identity's live grants in
step when the actor edits their own role.

With ``optimistic=True`` (the screen's behaviour) a repository failure that
is not a name collision is applied to local state anyway and reported as a
success with ``degraded=True``; with ``optimistic=False`` the failure is
re-raised.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from typing import Any, List, Optional

from admin_console.constants.modules import DEFAULT_CATALOG, ROLE_ADMIN_MODULE, ModuleCatalog
from admin_console.constants.roles import ROLE_PRESETS
from admin_console.errors import ConflictError, RepositoryError, RoleNotFoundError
from admin_console.repositories.roles import RoleRecord, RoleRepository
from admin_console.services.conflicts import RoleConflictResolver, is_duplicate_name_message
from admin_console.services.matrix import PermissionMatrix, coerce_matrix, empty_matrix, full_matrix, normalize, to_wire_format
from admin_console.services.policy import assert_can_delete, is_protected_role
from admin_console.services.sync import IdentityContext, RoleSyncPolicy
from admin_console.utils.validation import require_role_name

logger = logging.getLogger(__name__)

DUPLICATE_ROLE_MESSAGE = 'Already this role is created'


@dataclass
class SaveResult:
    role: RoleRecord
    created: bool
    synced: bool = False
    degraded: bool = False


def preset_roles(catalog: Optional[ModuleCatalog] = None) -> List[RoleRecord]:
    roles = []
    for idx, (name, codes) in enumerate(ROLE_PRESETS.items(), start=1):
        perms = full_matrix(catalog) if '*' in codes else empty_matrix(catalog)
        roles.append(RoleRecord(id=str(idx), name=name, status=True, permissions=perms))
    return roles


class RoleConsole:
    def __init__(
        self,
        repository: RoleRepository,
        identity: Optional[IdentityContext] = None,
        *,
        catalog: Optional[ModuleCatalog] = None,
        resolver: Optional[RoleConflictResolver] = None,
        sync_policy: Optional[RoleSyncPolicy] = None,
        optimistic: bool = True,
    ):
        self.repository = repository
        self.identity = identity if identity is not None else IdentityContext(catalog=catalog)
        self.catalog = catalog
        self.resolver = resolver or RoleConflictResolver()
        self.sync_policy = sync_policy or RoleSyncPolicy()
        self.optimistic = optimistic
        self._roles: List[RoleRecord] = []

    @property
    def roles(self) -> List[RoleRecord]:
        return list(self._roles)

    def load(self) -> List[RoleRecord]:
        try:
            records = self.repository.list()
        except RepositoryError:
            if not self.optimistic:
                raise
            logger.warning('Role listing failed; showing preset roles', exc_info=True)
            records = preset_roles(self.catalog)
        self._roles = [
            RoleRecord(id=r.id, name=r.name, status=r.status, permissions=normalize(r.permissions, self.catalog))
            for r in records
        ]
        return self.roles

    def get(self, role_id: Any) -> RoleRecord:
        for role in self._roles:
            if str(role.id) == str(role_id):
                return role
        raise RoleNotFoundError(f'Role {role_id} not found')

    def _replace_local(self, record: RoleRecord, previous_id: Any = None):
        key = str(previous_id if previous_id is not None else record.id)
        for idx, role in enumerate(self._roles):
            if str(role.id) == key:
                self._roles[idx] = record
                return
        self._roles.append(record)

    def _assert_unique(self, name: str, excluding_role_id: Any = None):
        if self.resolver.conflicts_with(name, self._roles, excluding_role_id):
            raise ConflictError(DUPLICATE_ROLE_MESSAGE)

    def _keep_role_admin_grant(self, matrix: PermissionMatrix, existing: RoleRecord) -> PermissionMatrix:
        """Admin roles keep their stored role-management grant on every edit."""
        catalog = self.catalog if self.catalog is not None else DEFAULT_CATALOG
        if ROLE_ADMIN_MODULE not in catalog:
            return matrix
        kept = dict(matrix)
        kept[ROLE_ADMIN_MODULE] = existing.permissions.get(ROLE_ADMIN_MODULE)
        return normalize(kept, self.catalog)

    def save_role(self, name: Optional[str], permissions: Any = None, role_id: Any = None) -> SaveResult:
        """Create (``role_id`` is None) or update a role."""
        clean_name = require_role_name(name)
        existing = self.get(role_id) if role_id is not None else None
        self._assert_unique(clean_name, role_id)

        matrix: PermissionMatrix = coerce_matrix(permissions, self.catalog)
        if existing is not None and is_protected_role(existing):
            matrix = self._keep_role_admin_grant(matrix, existing)
        wire = to_wire_format(matrix, self.catalog)
        try:
            if existing is None:
                saved = self.repository.create(clean_name, wire)
            else:
                saved = self.repository.update(existing.id, clean_name, wire)
        except RepositoryError as e:
            if is_duplicate_name_message(e.detail):
                raise ConflictError(DUPLICATE_ROLE_MESSAGE) from e
            if not self.optimistic:
                raise
            logger.warning('Role save failed (%s); applying locally', e.detail)
            if existing is None:
                record = RoleRecord(id=uuid.uuid4().hex, name=clean_name, status=True, permissions=matrix)
            else:
                record = RoleRecord(id=existing.id, name=clean_name, status=existing.status, permissions=matrix)
            self._replace_local(record)
            return SaveResult(role=record, created=existing is None, degraded=True)

        record = RoleRecord(
            id=saved.id,
            name=saved.name,
            status=saved.status,
            permissions=normalize(saved.permissions, self.catalog),
        )
        self._replace_local(record, existing.id if existing else None)
        synced = False
        if existing is not None:
            # a disabled role grants nothing, same as at login
            live = record.permissions if record.status else empty_matrix(self.catalog)
            synced = self.sync_policy.apply(existing.name, live, self.identity, new_name=record.name)
        return SaveResult(role=record, created=existing is None, synced=synced)

    def delete_role(self, role_id: Any):
        role = self.get(role_id)
        assert_can_delete(role)
        try:
            self.repository.delete(role.id)
        except RepositoryError:
            if not self.optimistic:
                raise
            logger.warning('Role delete failed; removing %s locally', role.name, exc_info=True)
        self._roles = [r for r in self._roles if str(r.id) != str(role.id)]

    def set_status(self, role_id: Any, enabled: bool) -> RoleRecord:
        role = self.get(role_id)
        try:
            self.repository.set_status(role.id, bool(enabled))
        except RepositoryError:
            if not self.optimistic:
                raise
            logger.warning('Role status update failed; applying locally for %s', role.name, exc_info=True)
        role.status = bool(enabled)
        return role

    def toggle_status(self, role_id: Any) -> RoleRecord:
        return self.set_status(role_id, not self.get(role_id).status)


__all__ = ['RoleConsole', 'SaveResult', 'preset_roles', 'DUPLICATE_ROLE_MESSAGE']
