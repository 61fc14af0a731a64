from flask import Blueprint, request
from flask_jwt_extended import get_jwt, get_jwt_identity

from admin_console import get_db
from admin_console.constants.modules import DEFAULT_CATALOG, ROLE_ADMIN_MODULE
from admin_console.decorators.audit import audit_log
from admin_console.decorators.auth import require_capability
from admin_console.errors import ValidationError
from admin_console.repositories.roles import SqlRoleRepository
from admin_console.routes.auth import issue_access_token
from admin_console.services.console import RoleConsole
from admin_console.services.matrix import to_wire_format
from admin_console.services.sync import IdentityContext
from admin_console.utils.validation import require_bool

roles_bp = Blueprint('roles', __name__)

MODULE = ROLE_ADMIN_MODULE


def _console() -> RoleConsole:
    # repository failures surface as 502 instead of applying locally
    console = RoleConsole(
        SqlRoleRepository(get_db),
        IdentityContext.from_claims(get_jwt()),
        optimistic=False,
    )
    console.load()
    return console


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('JSON object body required')
    return data


@roles_bp.get('/modules')
@require_capability(MODULE, 'read')
def list_modules():
    return {'data': DEFAULT_CATALOG.describe()}


@roles_bp.get('/roles')
@require_capability(MODULE, 'read')
def list_roles():
    return {'data': [r.as_dict() for r in _console().roles]}


@roles_bp.post('/roles')
@require_capability(MODULE, 'create')
@audit_log('ROLE.CREATE', meta_keys=['name'])
def create_role():
    data = _json_body()
    result = _console().save_role(data.get('name'), data.get('permissions'))
    return result.role.as_dict(), 201


@roles_bp.put('/roles/<int:role_id>')
@require_capability(MODULE, 'update')
@audit_log('ROLE.UPDATE', meta_keys=['name', 'synced'])
def update_role(role_id: int):
    data = _json_body()
    console = _console()
    current = console.get(role_id)
    name = data.get('name', current.name)
    permissions = data['permissions'] if 'permissions' in data else current.permissions
    result = console.save_role(name, permissions, role_id=role_id)
    body = result.role.as_dict()
    body['synced'] = result.synced
    if result.synced:
        # the editor's own role changed; hand back grants and a token carrying them
        body['live_permissions'] = to_wire_format(console.identity.live_permissions)
        body['access_token'] = issue_access_token(get_jwt_identity(), console.identity)
    return body


@roles_bp.put('/roles/<int:role_id>/status')
@require_capability(MODULE, 'update')
@audit_log('ROLE.STATUS.SET', meta_keys=['name', 'status'])
def set_role_status(role_id: int):
    data = _json_body()
    enabled = require_bool(data.get('status'), 'status')
    role = _console().set_status(role_id, enabled)
    return role.as_dict()


@roles_bp.delete('/roles/<int:role_id>')
@require_capability(MODULE, 'delete')
@audit_log('ROLE.DELETE', entity_id_arg='role_id', meta_keys=['name'])
def delete_role(role_id: int):
    console = _console()
    name = console.get(role_id).name
    console.delete_role(role_id)
    return {'id': role_id, 'name': name, 'deleted': True}
