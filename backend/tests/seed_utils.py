"""Test seeding helpers for roles, users and logins."""
from typing import Optional
from admin_console import get_db
from admin_console.models.authz import Role, User
from admin_console.repositories.roles import SqlRoleRepository
from admin_console.services.matrix import full_matrix, to_wire_format


def ensure_role(name: str, permissions=None, status: bool = True) -> Role:
    """Create a role through the SQL repository; permissions default to nothing."""
    session = get_db()
    role = session.query(Role).filter_by(name=name).one_or_none()
    if not role:
        repo = SqlRoleRepository(get_db)
        record = repo.create(name, to_wire_format(permissions or {}))
        if not status:
            repo.set_status(record.id, False)
        role = session.get(Role, record.id)
    return role


def ensure_admin_role(name: str = 'Super Admin') -> Role:
    return ensure_role(name, full_matrix())


def ensure_user(email: str, role: Optional[Role] = None, password: str = 'pw') -> User:
    session = get_db()
    u = session.query(User).filter_by(email=email).one_or_none()
    if not u:
        u = User(name=email.split('@')[0], email=email, password_hash='', role_id=role.id if role else None)
        u.set_password(password)
        session.add(u); session.commit(); session.refresh(u)
    return u


def login(client, email: str, password: str = 'pw') -> dict:
    resp = client.post('/auth/login', json={'email': email, 'password': password})
    assert resp.status_code == 200, resp.get_json()
    return {'Authorization': f"Bearer {resp.get_json()['access_token']}"}


def seed_admin_and_login(client, email: str = 'admin@test.local', role_name: str = 'Super Admin'):
    role = ensure_admin_role(role_name)
    user = ensure_user(email, role)
    return user, role, login(client, email)
