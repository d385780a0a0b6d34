from backoffice import get_db
from backoffice.models.authz import Role
from backoffice.models.audit import AuditLog
from backoffice.services.grants import compute_effective_permissions
from tests.test_utils_seed import seed_user_with_role, ensure_user, ensure_role, login

ROLE_ADMIN_CODES = [
    'system.roles.view_page', 'system.roles.create', 'system.roles.update', 'system.roles.delete',
    'accounting.users.view_page', 'accounting.users.update',
]


def _role_manager(client, email):
    seed_user_with_role(email, f'Manager of roles {email}', ROLE_ADMIN_CODES)
    return login(client, email)


def test_role_crud_flow(client):
    session = get_db()
    headers = _role_manager(client, 'roles.crud@example.com')

    # Create a role with an initial grant set
    resp = client.post('/iam/roles', json={
        'name': 'TempRole', 'description': 'temporary',
        'permissions': ['accounting.segments.view_page', 'accounting.segments.create'],
    }, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    role_id = resp.get_json()['id']
    assert resp.get_json()['permissions'] == ['accounting.segments.create', 'accounting.segments.view_page']

    got = client.get(f'/iam/roles/{role_id}', headers=headers)
    assert got.status_code == 200
    assert got.get_json()['name'] == 'TempRole'

    # Rename + replace grants in one update
    upd = client.put(f'/iam/roles/{role_id}', json={'name': 'TempRole2', 'permissions': ['accounting.cities.view_page']}, headers=headers)
    assert upd.status_code == 200, upd.get_json()
    body = upd.get_json()
    assert body['name'] == 'TempRole2'
    assert body['permissions'] == ['accounting.cities.view_page']
    assert body['changes']['removed'] == ['accounting.segments.create', 'accounting.segments.view_page']

    by_role = client.get(f'/iam/permissions/by-role/{role_id}', headers=headers).get_json()
    assert by_role['codes'] == ['accounting.cities.view_page']

    dele = client.delete(f'/iam/roles/{role_id}', headers=headers)
    assert dele.status_code == 200
    assert client.get(f'/iam/roles/{role_id}', headers=headers).status_code == 404

    actions = {a.action for a in session.query(AuditLog).all()}
    assert {'ROLE.CREATE', 'ROLE.UPDATE', 'ROLE.DELETE'} <= actions


def test_replace_permissions_records_audit_changes(client):
    session = get_db()
    headers = _role_manager(client, 'roles.replace@example.com')
    role = ensure_role('ReplaceTarget', ['hr.leaves.view_page'])

    resp = client.put(f'/iam/roles/{role.id}/permissions', json={'permissions': ['hr.leaves.view_page', 'hr.leaves.request']}, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json()['changes'] == {'added': ['hr.leaves.request'], 'removed': []}

    audit = session.query(AuditLog).filter(AuditLog.action=='ROLE.PERM.REPLACE').order_by(AuditLog.id.desc()).first()
    assert audit is not None
    assert audit.entity == 'Role' and audit.entity_id == str(role.id)
    assert audit.changes['added'] == ['hr.leaves.request']
    assert 'system.roles.update' in audit.actor_grants


def test_unknown_or_malformed_codes_rejected(client):
    headers = _role_manager(client, 'roles.unknown@example.com')
    role = ensure_role('UnknownCodesTarget', ['hr.leaves.view_page'])

    unknown = client.put(f'/iam/roles/{role.id}/permissions', json={'permissions': ['hr.leaves.fly']}, headers=headers)
    assert unknown.status_code == 400
    assert 'hr.leaves.fly' in unknown.get_json()['error']['detail']

    malformed = client.put(f'/iam/roles/{role.id}/permissions', json={'permissions': ['hr.leaves']}, headers=headers)
    assert malformed.status_code == 400

    # Grants untouched after the rejected requests
    codes = client.get(f'/iam/permissions/by-role/{role.id}', headers=headers).get_json()['codes']
    assert codes == ['hr.leaves.view_page']

    create = client.post('/iam/roles', json={'name': 'NeverCreated', 'permissions': ['nope.nope.nope']}, headers=headers)
    assert create.status_code == 400
    assert get_db().query(Role).filter_by(name='NeverCreated').one_or_none() is None


def test_system_roles_are_protected(client):
    session = get_db()
    headers = _role_manager(client, 'roles.system@example.com')
    admin_role = session.query(Role).filter_by(name='Admin').one()
    gerant_role = session.query(Role).filter_by(name='Gérant').one()
    assert admin_role.is_system and gerant_role.is_system

    assert client.put(f'/iam/roles/{admin_role.id}/permissions', json={'permissions': []}, headers=headers).status_code == 403
    assert client.put(f'/iam/roles/{gerant_role.id}', json={'name': 'Renamed'}, headers=headers).status_code == 400
    assert client.delete(f'/iam/roles/{gerant_role.id}', headers=headers).status_code == 400
    # Description edits on a system role are fine
    ok = client.put(f'/iam/roles/{gerant_role.id}', json={'description': 'Gestion du centre'}, headers=headers)
    assert ok.status_code == 200


def test_assigned_role_cannot_be_deleted(client):
    headers = _role_manager(client, 'roles.assigned@example.com')
    user, role = seed_user_with_role('holder@example.com', 'HeldRole', ['training.forums.view_page'])
    resp = client.delete(f'/iam/roles/{role.id}', headers=headers)
    assert resp.status_code == 400


def test_duplicate_role_name_rejected(client):
    headers = _role_manager(client, 'roles.dup@example.com')
    assert client.post('/iam/roles', json={'name': 'DupRole'}, headers=headers).status_code == 201
    assert client.post('/iam/roles', json={'name': 'DupRole'}, headers=headers).status_code == 400
    assert client.post('/iam/roles', json={'name': '  '}, headers=headers).status_code == 400


def test_set_user_roles_changes_effective_permissions(client):
    session = get_db()
    headers = _role_manager(client, 'roles.assign@example.com')
    target = ensure_user('assign.target@example.com')
    r1 = ensure_role('AssignA', ['hr.schedules.view_page'])
    r2 = ensure_role('AssignB', ['hr.payroll.view_page'])

    resp = client.put(f'/iam/users/{target.id}/roles', json={'role_ids': [r1.id, r2.id]}, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    eff = compute_effective_permissions(target.id)
    assert eff['perms'] == ['hr.payroll.view_page', 'hr.schedules.view_page']

    resp = client.put(f'/iam/users/{target.id}/roles', json={'role_ids': [r2.id]}, headers=headers)
    assert resp.get_json()['changes'] == {'added': [], 'removed': [r1.id]}
    assert compute_effective_permissions(target.id)['perms'] == ['hr.payroll.view_page']

    user_perms = client.get(f'/iam/permissions/user/{target.id}', headers=headers).get_json()
    assert user_perms['data'] == ['hr.payroll.view_page']

    assert client.put(f'/iam/users/{target.id}/roles', json={'role_ids': [999999]}, headers=headers).status_code == 400
    assert client.put('/iam/users/999999/roles', json={'role_ids': []}, headers=headers).status_code == 404
    assert session.query(AuditLog).filter(AuditLog.action=='USER.ROLES.SET').count() >= 2


def test_grant_changes_visible_in_me_without_relogin(client):
    headers_mgr = _role_manager(client, 'roles.fresh@example.com')
    user, role = seed_user_with_role('fresh.user@example.com', 'FreshRole', ['hr.holidays.view_page'])
    headers = login(client, 'fresh.user@example.com')
    client.put(f'/iam/roles/{role.id}/permissions', json={'permissions': ['hr.holidays.view_page', 'hr.holidays.manage']}, headers=headers_mgr)
    body = client.get('/iam/auth/me', headers=headers).get_json()
    assert 'hr.holidays.manage' in body['permissions']
