from backoffice.models.authz import User
from backoffice import get_db
from tests.test_utils_seed import seed_user_with_role, ensure_user, login


def test_login_and_me(client):
    # Seed a user manually
    session = get_db()
    u = User(name='T', email='t@example.com', password_hash='')
    u.set_password('pw')
    session.add(u)
    session.commit()

    # Login
    resp = client.post('/iam/auth/login', json={'email': 't@example.com', 'password': 'pw'})
    assert resp.status_code == 200, resp.get_json()
    token = resp.get_json()['access_token']

    me = client.get('/iam/auth/me', headers={'Authorization': f'Bearer {token}'})
    assert me.status_code == 200
    body = me.get_json()
    assert body['email'] == 't@example.com'
    assert body['role'] == 'employee'
    assert body['permissions'] == []
    assert body['viewable_pages'] == []
    assert body['modules'] == []
    assert body['capabilities']['accounting']['can_view_segments'] is False


def test_login_rejects_bad_credentials(client):
    ensure_user('badpw@example.com')
    resp = client.post('/iam/auth/login', json={'email': 'badpw@example.com', 'password': 'nope'})
    assert resp.status_code == 401
    assert client.post('/iam/auth/login', json={'email': 'badpw@example.com'}).status_code == 400


def test_inactive_user_cannot_login(client):
    u = ensure_user('inactive@example.com')
    session = get_db()
    u.is_active = False
    session.commit()
    resp = client.post('/iam/auth/login', json={'email': 'inactive@example.com', 'password': 'pw'})
    assert resp.status_code == 403


def test_me_reports_pages_modules_and_capabilities(client):
    seed_user_with_role('gerant.me@example.com', 'SegmentsViewer', ['accounting.segments.view_page'], base_role='gerant')
    headers = login(client, 'gerant.me@example.com')
    body = client.get('/iam/auth/me', headers=headers).get_json()
    assert body['role'] == 'gerant'
    assert body['is_admin'] is False
    assert body['viewable_pages'] == ['accounting.segments.view_page']
    assert body['modules'] == ['accounting']
    caps = body['capabilities']['accounting']
    assert caps['can_view_segments'] is True
    assert caps['can_create_segment'] is False


def test_me_for_admin_reports_wildcard_page(client):
    ensure_user('root.me@example.com', role='admin')
    headers = login(client, 'root.me@example.com')
    body = client.get('/iam/auth/me', headers=headers).get_json()
    assert body['is_admin'] is True
    assert body['viewable_pages'] == ['*']
    assert body['modules'] == ['accounting', 'training', 'hr', 'commercialisation', 'system']
    assert all(all(caps.values()) for caps in body['capabilities'].values())


def test_check_endpoint_modes(client):
    seed_user_with_role('checker@example.com', 'CheckerRole', ['training.sessions.view_page'])
    headers = login(client, 'checker@example.com')
    granted, missing = 'training.sessions.view_page', 'training.sessions.create'

    all_resp = client.get(f'/iam/auth/check?code={granted}&code={missing}', headers=headers)
    assert all_resp.status_code == 200
    body = all_resp.get_json()
    assert body['mode'] == 'all'
    assert body['allowed'] is False
    assert body['results'] == {granted: True, missing: False}

    any_resp = client.get(f'/iam/auth/check?code={granted}&code={missing}&mode=any', headers=headers)
    assert any_resp.get_json()['allowed'] is True


def test_check_endpoint_empty_sets(client):
    ensure_user('root.check@example.com', role='admin')
    headers = login(client, 'root.check@example.com')
    assert client.get('/iam/auth/check', headers=headers).get_json()['allowed'] is True
    assert client.get('/iam/auth/check?mode=any', headers=headers).get_json()['allowed'] is False


def test_check_endpoint_rejects_malformed_codes(client):
    ensure_user('malformed@example.com')
    headers = login(client, 'malformed@example.com')
    resp = client.get('/iam/auth/check?code=accounting.segments', headers=headers)
    assert resp.status_code == 400
    assert resp.get_json()['error']['status'] == 400
    assert client.get('/iam/auth/check?code=a.b.c&mode=some', headers=headers).status_code == 400
    assert client.get('/iam/auth/check?code=accounting.segments.view_page%0A', headers=headers).status_code == 400


def test_me_requires_token(client):
    assert client.get('/iam/auth/me').status_code == 401


def test_login_rejects_unknown_base_role(client):
    u = ensure_user('oddrole@example.com')
    session = get_db()
    u.role = 'superuser'
    session.commit()
    resp = client.post('/iam/auth/login', json={'email': 'oddrole@example.com', 'password': 'pw'})
    assert resp.status_code == 403
    assert resp.get_json()['error']['detail'] == 'invalid account role'
