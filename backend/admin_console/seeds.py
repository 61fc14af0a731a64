"""Idempotent seeding of the default roles and the first administrator."""
from __future__ import annotations
import logging
import os
from typing import Dict, List, Tuple

from sqlalchemy import select

from admin_console.constants.roles import ROLE_PRESETS, SUPER_ADMIN_ROLE
from admin_console.models.authz import Role, User
from admin_console.repositories.roles import SqlRoleRepository
from admin_console.services.conflicts import RoleConflictResolver
from admin_console.services.matrix import empty_matrix, full_matrix, to_wire_format

logger = logging.getLogger(__name__)


def preset_wire(codes: List[str]):
    return to_wire_format(full_matrix() if '*' in codes else empty_matrix())


def missing_presets(session) -> List[str]:
    """Preset names with no existing role (aliases included)."""
    resolver = RoleConflictResolver()
    known: list = SqlRoleRepository(lambda: session).list()
    missing = []
    for name in ROLE_PRESETS:
        if resolver.conflicts_with(name, known):
            continue
        missing.append(name)
        known.append({'name': name})
    return missing


def ensure_roles(session) -> int:
    """Create missing preset roles; existing roles keep their grants."""
    repo = SqlRoleRepository(lambda: session)
    missing = missing_presets(session)
    for name in missing:
        repo.create(name, preset_wire(ROLE_PRESETS[name]))
    return len(missing)


def admin_user_missing(session) -> bool:
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
    return session.execute(select(User).where(User.email == admin_email)).scalar_one_or_none() is None


def ensure_initial_admin(session) -> bool:
    admin_role = session.execute(select(Role).where(Role.name == SUPER_ADMIN_ROLE)).scalar_one_or_none()
    if not admin_role:
        logger.warning('%s role missing; skipping admin user creation', SUPER_ADMIN_ROLE)
        return False
    if not admin_user_missing(session):
        return False
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
    user = User(name='Administrator', email=admin_email, password_hash='', role_id=admin_role.id)
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    session.commit()
    logger.info('Created initial admin user %s with temporary password', admin_email)
    return True


def summarize_roles(session) -> List[Tuple[str, int, bool]]:
    rows = []
    for role in session.execute(select(Role).order_by(Role.id)).scalars().all():
        granted = sum(1 for rp in role.permissions if any(rp.as_grant().values()))
        rows.append((role.name, granted, bool(role.status)))
    return rows


def role_grant_map(session) -> Dict[str, list]:
    return {
        role.name: sorted(rp.module for rp in role.permissions if rp.can_read)
        for role in session.execute(select(Role)).scalars().all()
    }
