from flask import Blueprint, request, abort, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity
from sqlalchemy import select, delete, func
from backoffice import get_db, get_permission_catalog
from backoffice.constants.permissions import ADMIN_ROLE_NAME
from backoffice.models.authz import User, Role, RolePermission, UserRole
from backoffice.config.pagination import normalize_pagination, paginate_sequence
from backoffice.utils.listing import build_list_payload, make_cached_list_response
from backoffice.decorators.audit import audit_log
from backoffice.decorators.auth import require_permissions, require_any_permission, require_page
from backoffice.services.catalog import PermissionKey, MalformedPermissionCode, iter_permissions, permission_tree, module_stats
from backoffice.services.capabilities import all_capabilities
from backoffice.services.grants import (
    UnknownPermissionCodes, compute_effective_permissions, current_principal, load_principal,
    replace_role_grants, granted_codes,
)
from backoffice.services.policy import Role as BaseRole, accessible_modules, can, can_all, can_any, viewable_pages

iam_bp = Blueprint('iam', __name__)


def _role_json(role: Role, with_permissions: bool = True):
    data = {'id': role.id, 'name': role.name, 'description': role.description, 'is_system': role.is_system}
    if with_permissions:
        data['permissions'] = sorted(rp.permission.code for rp in role.permissions)
    return data


def _get_role_or_404(role_id: int) -> Role:
    role = get_db().execute(select(Role).where(Role.id==role_id)).scalar_one_or_none()
    if not role:
        abort(404, description='Role not found')
    return role


def _replace_grants_or_400(role: Role, codes):
    if not isinstance(codes, list):
        abort(400, description='permissions must be a list of codes')
    try:
        return replace_role_grants(get_db(), role, codes)
    except (UnknownPermissionCodes, MalformedPermissionCode) as e:
        get_db().rollback()
        abort(400, description=str(e))


# --- Catalog ---

@iam_bp.get('/permissions')
@require_page('system', 'roles')
def list_permissions():
    module = request.args.get('module')
    rows = [
        {
            'code': key.code, 'module': key.module, 'menu': key.menu, 'action': key.action,
            'label': d.label, 'description': d.description, 'sort_order': d.sort_order,
        }
        for key, d in iter_permissions(get_permission_catalog(), display=True)
        if module is None or key.module == module
    ]
    try:
        page, total, limit, offset = paginate_sequence(rows, request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    return make_cached_list_response(page, total, limit, offset)


@iam_bp.get('/permissions/tree')
@require_page('system', 'roles')
def permissions_tree():
    return {'data': permission_tree(get_permission_catalog())}


@iam_bp.get('/permissions/stats')
@require_page('system', 'roles')
def permissions_stats():
    session = get_db()
    by_module = module_stats(get_permission_catalog())
    return {
        'by_module': by_module,
        'totals': {
            'permissions': sum(m['permission_count'] for m in by_module),
            'roles': session.execute(select(func.count(Role.id))).scalar_one(),
            'assignments': session.execute(select(func.count(RolePermission.id))).scalar_one(),
        }
    }


@iam_bp.get('/permissions/by-role/<int:role_id>')
@require_page('system', 'roles')
def role_permissions(role_id: int):
    role = _get_role_or_404(role_id)
    perms = sorted((rp.permission for rp in role.permissions), key=lambda p: (p.module, p.menu, p.sort_order))
    return {
        'role_id': role.id,
        'data': [{'id': p.id, 'code': p.code, 'label': p.label} for p in perms],
        'codes': [p.code for p in perms],
    }


@iam_bp.get('/permissions/user/<int:user_id>')
@require_any_permission('system.roles.view_page', 'accounting.users.view_page')
def user_permissions(user_id: int):
    session = get_db()
    user = session.execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    return {'user_id': user.id, 'role': user.role, 'data': sorted(granted_codes(session, user.id))}


# --- Roles ---

@iam_bp.get('/roles')
@require_page('system', 'roles')
def list_roles():
    session = get_db()
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = session.execute(select(func.count(Role.id))).scalar_one()
    rows = session.execute(select(Role).order_by(Role.id.asc()).offset(offset).limit(limit)).scalars().all()
    return build_list_payload([_role_json(r) for r in rows], total, limit, offset)


@iam_bp.get('/roles/<int:role_id>')
@require_page('system', 'roles')
def get_role(role_id: int):
    return _role_json(_get_role_or_404(role_id))


@iam_bp.post('/roles')
@require_permissions('system.roles.create')
@audit_log('ROLE.CREATE', entity='Role', entity_id_key='id')
def create_role():
    data = request.json or {}
    name = (data.get('name') or '').strip()
    if not name:
        abort(400, description='name required')
    session = get_db()
    if session.execute(select(Role).where(Role.name==name)).scalar_one_or_none():
        abort(400, description='A role with this name already exists')
    role = Role(name=name, is_system=False, description=data.get('description'))
    session.add(role)
    session.flush()
    changes = {'name': name}
    if data.get('permissions') is not None:
        changes.update(_replace_grants_or_400(role, data['permissions']))
    session.commit()
    return {**_role_json(role), 'changes': changes}, 201


@iam_bp.put('/roles/<int:role_id>')
@require_permissions('system.roles.update')
@audit_log('ROLE.UPDATE', entity='Role', entity_id_key='id')
def update_role(role_id: int):
    session = get_db()
    role = _get_role_or_404(role_id)
    data = request.json or {}
    if data.get('permissions') is not None and role.name == ADMIN_ROLE_NAME:
        abort(403, description='Cannot modify admin role permissions')
    changes = {}
    name = data.get('name')
    if name is not None:
        name = name.strip()
        if not name:
            abort(400, description='name cannot be empty')
        if name != role.name:
            if role.is_system:
                abort(400, description='Cannot rename system roles')
            if session.execute(select(Role).where(Role.name==name)).scalar_one_or_none():
                abort(400, description='A role with this name already exists')
            changes['name'] = {'before': role.name, 'after': name}
            role.name = name
    if 'description' in data:
        role.description = data.get('description')
    if data.get('permissions') is not None:
        changes.update(_replace_grants_or_400(role, data['permissions']))
    session.commit()
    return {**_role_json(role), 'changes': changes}


@iam_bp.delete('/roles/<int:role_id>')
@require_permissions('system.roles.delete')
@audit_log('ROLE.DELETE', entity='Role', entity_id_arg='role_id')
def delete_role(role_id: int):
    session = get_db()
    role = _get_role_or_404(role_id)
    if role.is_system:
        abort(400, description='Cannot delete system roles')
    assigned = session.execute(select(func.count(UserRole.id)).where(UserRole.role_id==role.id)).scalar_one()
    if assigned:
        abort(400, description='Cannot delete role that is assigned to users. Reassign users first.')
    name = role.name
    session.delete(role)
    session.commit()
    return {'deleted': True, 'name': name}


@iam_bp.put('/roles/<int:role_id>/permissions')
@require_permissions('system.roles.update')
@audit_log('ROLE.PERM.REPLACE', entity='Role', entity_id_key='id')
def replace_role_permissions(role_id: int):
    session = get_db()
    role = _get_role_or_404(role_id)
    if role.name == ADMIN_ROLE_NAME:
        abort(403, description='Cannot modify admin role permissions')
    data = request.json or {}
    changes = _replace_grants_or_400(role, data.get('permissions') or [])
    session.commit()
    return {'id': role.id, 'permissions': _role_json(role)['permissions'], 'changes': changes}


@iam_bp.put('/users/<int:user_id>/roles')
@require_permissions('accounting.users.update')
@audit_log('USER.ROLES.SET', entity='User', entity_id_key='user_id')
def set_user_roles(user_id: int):
    session = get_db()
    user = session.execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    data = request.json or {}
    role_ids = set(data.get('role_ids') or [])
    roles = session.execute(select(Role).where(Role.id.in_(list(role_ids)))).scalars().all() if role_ids else []
    missing = role_ids - {r.id for r in roles}
    if missing:
        abort(400, description=f'Unknown role ids: {sorted(missing)}')
    before = set(session.execute(select(UserRole.role_id).where(UserRole.user_id==user.id)).scalars().all())
    session.execute(delete(UserRole).where(UserRole.user_id==user.id))
    for rid in role_ids:
        session.add(UserRole(user_id=user.id, role_id=rid))
    session.commit()
    return {
        'user_id': user.id,
        'role_ids': sorted(role_ids),
        'changes': {'added': sorted(role_ids - before), 'removed': sorted(before - role_ids)},
    }


# --- Auth ---

@iam_bp.post('/auth/login')
def login():
    data = request.json or {}
    email = data.get('email'); password = data.get('password')
    if not email or not password:
        abort(400, description='email & password required')
    session = get_db()
    user = session.execute(select(User).where(User.email==email)).scalar_one_or_none()
    if not user or not user.verify_password(password):
        abort(401, description='invalid credentials')
    if not user.is_active:
        abort(403, description='account disabled')
    try:
        role = BaseRole.parse(user.role)
    except ValueError:
        current_app.logger.warning('User %s has invalid base role %r', user.id, user.role)
        abort(403, description='invalid account role')
    eff = compute_effective_permissions(user.id)
    claims = {
        'role': role.value,
        'roles': eff['roles'],
        'perms': eff['perms'],
    }
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    token = create_access_token(identity=str(user.id), additional_claims=claims)
    return {'access_token': token}


@iam_bp.get('/auth/me')
@jwt_required()
def me():
    user_id = int(get_jwt_identity())
    session = get_db()
    user = session.execute(select(User).where(User.id==user_id)).scalar_one_or_none()
    if not user:
        abort(404)
    # Fresh from the store, so grant edits show up without re-login
    principal = load_principal(user, session)
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'role': principal.role.value,
        'is_admin': principal.is_admin,
        'permissions': sorted(principal.granted),
        'viewable_pages': list(viewable_pages(principal)),
        'modules': list(accessible_modules(principal, get_permission_catalog())),
        'capabilities': all_capabilities(principal),
    }


@iam_bp.get('/auth/check')
@jwt_required()
def check():
    """Evaluate ``code`` query params for the caller; ``mode`` is ``all`` (default) or ``any``."""
    codes = request.args.getlist('code')
    mode = request.args.get('mode', 'all')
    if mode not in ('all', 'any'):
        abort(400, description="mode must be 'all' or 'any'")
    try:
        keys = [PermissionKey.parse(c) for c in codes]
    except MalformedPermissionCode as e:
        abort(400, description=str(e))
    principal = current_principal()
    allowed = can_all(principal, keys) if mode == 'all' else can_any(principal, keys)
    return {
        'mode': mode,
        'allowed': allowed,
        'results': {k.code: can(principal, k) for k in keys},
    }
