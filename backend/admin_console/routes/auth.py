from flask import Blueprint, request, abort
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select
from typing import Any, Dict

from admin_console import get_db
from admin_console.models.authz import User
from admin_console.services.matrix import empty_matrix, normalize, to_wire_format
from admin_console.services.sync import IdentityContext

auth_bp = Blueprint('auth', __name__)


def user_identity(user: User) -> IdentityContext:
    """Identity issued at login; a disabled role grants nothing."""
    role = user.role
    if role is None:
        return IdentityContext()
    perms = normalize(role.permission_map()) if role.status else empty_matrix()
    return IdentityContext(role=role.name, permissions=perms)


def identity_claims(identity: IdentityContext) -> Dict[str, Any]:
    return {
        'role': identity.role,
        'perms': to_wire_format(identity.live_permissions),
    }


def issue_access_token(user_id: Any, identity: IdentityContext) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(user_id), additional_claims=identity_claims(identity))


@auth_bp.post('/login')
def login():
    data = request.get_json(silent=True) or {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user or not user.is_active or not user.verify_password(password):
        abort(401, description='invalid credentials')
    identity = user_identity(user)
    return {
        'access_token': issue_access_token(user.id, identity),
        **identity_claims(identity),
    }


@auth_bp.get('/me')
@jwt_required()
def me():
    # Identity stored as string, cast back to int for DB lookup
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    identity = user_identity(user)
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        **identity_claims(identity),
    }
