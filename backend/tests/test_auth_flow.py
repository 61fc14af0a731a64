from flask_jwt_extended import decode_token

from admin_console.services.matrix import set_row_all

from tests.seed_utils import ensure_role, ensure_user, login


def _perm(perms, module):
    return next(p for p in perms if p['module'] == module)


def test_login_issues_role_and_normalized_perms(client, app_instance):
    role = ensure_role('Vendor', {'vendors': {'read': True, 'delete': True}, 'bookings': {'read': True, 'update': True}})
    ensure_user('vendor@test.local', role)
    resp = client.post('/auth/login', json={'email': 'vendor@test.local', 'password': 'pw'})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['role'] == 'Vendor'
    assert _perm(body['perms'], 'bookings') == {'module': 'bookings', 'create': False, 'read': True, 'update': False, 'delete': False}
    with app_instance.app_context():
        claims = decode_token(body['access_token'])
    assert claims['role'] == 'Vendor'
    assert _perm(claims['perms'], 'vendors')['delete'] is True


def test_invalid_credentials(client):
    ensure_user('someone@test.local')
    resp = client.post('/auth/login', json={'email': 'someone@test.local', 'password': 'wrong'})
    assert resp.status_code == 401
    assert client.post('/auth/login', json={}).status_code == 400


def test_disabled_role_grants_nothing(client):
    role = ensure_role('Captain', set_row_all({}, 'captain_details', True), status=False)
    ensure_user('captain@test.local', role)
    headers = login(client, 'captain@test.local')
    me = client.get('/auth/me', headers=headers).get_json()
    assert me['role'] == 'Captain'
    assert not any(p['read'] for p in me['perms'])


def test_user_without_role(client):
    ensure_user('nobody@test.local')
    headers = login(client, 'nobody@test.local')
    me = client.get('/auth/me', headers=headers).get_json()
    assert me['role'] is None
    assert client.get('/admin/roles', headers=headers).status_code == 403
