"""Role persistence.

``RoleRepository`` is the contract the role console consumes; failures are
reported as ``RepositoryError`` with free-form messages, which callers sniff
for duplicate-name wording. ``SqlRoleRepository`` implements it on the
SQLAlchemy models.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from admin_console.errors import RepositoryError, RoleNotFoundError
from admin_console.models.authz import Role, RolePermission
from admin_console.services.matrix import PermissionMatrix, normalize
from admin_console.services.policy import assert_can_delete

WireMatrix = Sequence[Mapping[str, Any]]


@dataclass
class RoleRecord:
    id: Any
    name: str
    status: bool = True
    permissions: PermissionMatrix = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'permissions': [{'module': k, **g.as_dict()} for k, g in self.permissions.items()],
        }


class RoleRepository(Protocol):
    def list(self) -> List[RoleRecord]: ...

    def create(self, name: str, permissions: WireMatrix) -> RoleRecord: ...

    def update(self, role_id: Any, name: str, permissions: WireMatrix) -> RoleRecord: ...

    def delete(self, role_id: Any) -> None: ...

    def set_status(self, role_id: Any, enabled: bool) -> None: ...


def role_to_record(role: Role) -> RoleRecord:
    return RoleRecord(
        id=role.id,
        name=role.name,
        status=bool(role.status),
        permissions=normalize(role.permission_map()),
    )


class SqlRoleRepository:
    def __init__(self, session_factory: Callable[[], Any]):
        self.session_factory = session_factory

    def _get(self, session, role_id: Any) -> Role:
        try:
            rid = int(role_id)
        except (TypeError, ValueError):
            raise RoleNotFoundError(f'Role {role_id} not found') from None
        role = session.execute(select(Role).where(Role.id == rid)).scalar_one_or_none()
        if not role:
            raise RoleNotFoundError(f'Role {role_id} not found')
        return role

    def _commit(self, session):
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            raise RepositoryError('role name already exists') from e
        except SQLAlchemyError as e:
            session.rollback()
            raise RepositoryError(str(e)) from e

    @staticmethod
    def _write_permissions(role: Role, permissions: WireMatrix):
        existing = {rp.module: rp for rp in role.permissions}
        wanted = set()
        for entry in permissions:
            module = entry.get('module')
            if not module:
                continue
            wanted.add(module)
            row = existing.get(module)
            if row is None:
                row = RolePermission(module=module)
                role.permissions.append(row)
            row.can_create = bool(entry.get('create'))
            row.can_read = bool(entry.get('read'))
            row.can_update = bool(entry.get('update'))
            row.can_delete = bool(entry.get('delete'))
        for module, row in existing.items():
            if module not in wanted:
                role.permissions.remove(row)

    def list(self) -> List[RoleRecord]:
        session = self.session_factory()
        try:
            rows = session.execute(select(Role).order_by(Role.id.asc())).scalars().all()
        except SQLAlchemyError as e:
            raise RepositoryError(str(e)) from e
        return [role_to_record(r) for r in rows]

    def get(self, role_id: Any) -> RoleRecord:
        session = self.session_factory()
        return role_to_record(self._get(session, role_id))

    def create(self, name: str, permissions: WireMatrix) -> RoleRecord:
        session = self.session_factory()
        role = Role(name=name.strip(), status=True)
        self._write_permissions(role, permissions)
        session.add(role)
        self._commit(session)
        return role_to_record(role)

    def update(self, role_id: Any, name: str, permissions: WireMatrix) -> RoleRecord:
        session = self.session_factory()
        role = self._get(session, role_id)
        role.name = name.strip()
        self._write_permissions(role, permissions)
        self._commit(session)
        return role_to_record(role)

    def delete(self, role_id: Any) -> None:
        session = self.session_factory()
        role = self._get(session, role_id)
        assert_can_delete(role)
        session.delete(role)
        self._commit(session)

    def set_status(self, role_id: Any, enabled: bool) -> None:
        session = self.session_factory()
        role = self._get(session, role_id)
        role.status = bool(enabled)
        self._commit(session)


__all__ = ['RoleRecord', 'RoleRepository', 'SqlRoleRepository', 'role_to_record']
