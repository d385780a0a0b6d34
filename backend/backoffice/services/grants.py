"""Relational side of authorization: principals from role grants, catalog seeding, drift checks."""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Set

from flask import current_app, g
from flask_jwt_extended import get_jwt, get_jwt_identity
from sqlalchemy import select, delete, func

from backoffice import get_db
from backoffice.constants.permissions import WILDCARD, ROLE_PRESETS, SYSTEM_ROLES
from backoffice.models.authz import Permission, Role, RolePermission, User, UserRole
from backoffice.services.catalog import Catalog, PermissionKey, all_permission_codes, iter_permissions
from backoffice.services.policy import Principal, Role as BaseRole

WILDCARD_LABEL = 'Toutes les permissions'


class UnknownPermissionCodes(ValueError):
    def __init__(self, codes: Iterable[str]):
        self.codes = sorted(codes)
        super().__init__(f'Unknown permission codes: {self.codes}')


def granted_codes(session, user_id: int) -> Set[str]:
    rows = session.execute(
        select(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(UserRole, UserRole.role_id == RolePermission.role_id)
        .where(UserRole.user_id == user_id)
    ).scalars().all()
    return set(rows)


def load_principal(user: User, session=None) -> Principal:
    session = session or get_db()
    return Principal(role=user.role, granted=granted_codes(session, user.id), id=user.id)


def compute_effective_permissions(user_id: int) -> Dict[str, List]:
    session = get_db()
    role_ids = session.execute(select(UserRole.role_id).where(UserRole.user_id == user_id)).scalars().all()
    return {
        'roles': sorted(role_ids),
        'perms': sorted(granted_codes(session, user_id)),
    }


def current_principal() -> Principal:
    """Principal of the current request, built from the JWT claims issued at login.

    Grants are frozen into the token: a revoked grant keeps passing route guards
    until the user logs in again or the token expires
    (``JWT_ACCESS_TOKEN_EXPIRES_HOURS``). ``load_principal`` reads the live grants.
    """
    if 'principal' not in g:
        claims = get_jwt()
        ident = get_jwt_identity()
        g.principal = Principal(
            role=claims.get('role', BaseRole.EMPLOYEE.value),
            granted=claims.get('perms', []),
            id=int(ident) if ident is not None else None,
        )
    return g.principal


def sync_catalog(session, catalog: Catalog) -> Dict[str, int]:
    """Insert catalog codes missing from the store and refresh drifted labels. Never deletes."""
    existing = {p.code: p for p in session.execute(select(Permission)).scalars().all()}
    created = updated = 0
    for key, d in iter_permissions(catalog):
        row = existing.get(key.code)
        if row is None:
            session.add(Permission(
                code=key.code, module=key.module, menu=key.menu, action=key.action,
                label=d.label, description=d.description, sort_order=d.sort_order,
            ))
            created += 1
        elif (row.label, row.description, row.sort_order) != (d.label, d.description, d.sort_order):
            row.label, row.description, row.sort_order = d.label, d.description, d.sort_order
            updated += 1
    if WILDCARD not in existing:
        session.add(Permission(
            code=WILDCARD, module=WILDCARD, menu=WILDCARD, action=WILDCARD,
            label=WILDCARD_LABEL, description='Accès à toutes les pages et actions', sort_order=0,
        ))
        created += 1
    session.flush()
    return {'created': created, 'updated': updated}


def find_dangling(session, catalog: Catalog) -> List[Dict[str, object]]:
    """Stored codes the catalog no longer declares, with how many role grants still reference them."""
    known = set(all_permission_codes(catalog))
    known.add(WILDCARD)
    rows = session.execute(
        select(Permission.code, func.count(RolePermission.id))
        .outerjoin(RolePermission, RolePermission.permission_id == Permission.id)
        .group_by(Permission.id, Permission.code)
        .order_by(Permission.code)
    ).all()
    return [{'code': code, 'grants': grants} for code, grants in rows if code not in known]


def resolve_permissions(session, codes: Iterable[str]) -> List[Permission]:
    """Map requested codes to stored rows. Malformed codes raise, unknown ones raise UnknownPermissionCodes."""
    wanted = set(codes)
    for code in wanted:
        if code != WILDCARD:
            PermissionKey.parse(code)
    if not wanted:
        return []
    perms = session.execute(select(Permission).where(Permission.code.in_(list(wanted)))).scalars().all()
    missing = wanted - {p.code for p in perms}
    if missing:
        raise UnknownPermissionCodes(missing)
    return perms


def replace_role_grants(session, role: Role, codes: Iterable[str]) -> Dict[str, List[str]]:
    """Set ``role``'s grants to exactly ``codes``; returns the added/removed codes."""
    perms = resolve_permissions(session, codes)
    before = {rp.permission.code for rp in role.permissions}
    after = {p.code for p in perms}
    session.execute(delete(RolePermission).where(RolePermission.role_id == role.id))
    for p in perms:
        session.add(RolePermission(role_id=role.id, permission_id=p.id))
    session.flush()
    session.expire(role, ['permissions'])
    return {'added': sorted(after - before), 'removed': sorted(before - after)}


def apply_role_presets(session, presets: Optional[Dict[str, List[str]]] = None) -> int:
    """Create preset roles and add any preset grant they lack. Existing extra grants are left alone."""
    presets = ROLE_PRESETS if presets is None else presets
    existing = {r.name: r for r in session.execute(select(Role)).scalars().all()}
    created = 0
    for name in presets:
        if name not in existing:
            role = Role(name=name, is_system=name in SYSTEM_ROLES, description=name)
            session.add(role)
            existing[name] = role
            created += 1
    session.flush()

    by_code = {p.code: p for p in session.execute(select(Permission)).scalars().all()}
    for name, codes in presets.items():
        role = existing[name]
        current = {rp.permission.code for rp in role.permissions}
        for code in codes:
            if code in current:
                continue
            perm = by_code.get(code)
            if perm is None:
                current_app.logger.warning("Preset role %s references unknown permission %s", name, code)
                continue
            role.permissions.append(RolePermission(permission=perm))
    session.flush()
    return created


__all__ = [
    'UnknownPermissionCodes', 'granted_codes', 'load_principal', 'compute_effective_permissions',
    'current_principal', 'sync_catalog', 'find_dangling', 'resolve_permissions', 'replace_role_grants',
    'apply_role_presets',
]
