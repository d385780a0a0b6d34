"""Test seeding utilities to reduce duplication.

Catalog permissions are already stored by the session fixture; these helpers
only create users, roles and grants on top of them.
"""
from typing import Iterable, Optional
from backoffice import get_db
from backoffice.models.authz import User, Role, Permission, RolePermission, UserRole


def ensure_user(email: str, name: Optional[str] = None, password: str = 'pw', role: str = 'employee') -> User:
    session = get_db()
    u = session.query(User).filter_by(email=email).one_or_none()
    if not u:
        u = User(name=name or email.split('@')[0], email=email, password_hash='', role=role)
        u.set_password(password)
        session.add(u); session.commit(); session.refresh(u)
    return u


def ensure_role(name: str, perm_codes: Iterable[str] = ()) -> Role:
    """Role holding (at least) ``perm_codes``; codes must already be stored."""
    session = get_db()
    role = session.query(Role).filter_by(name=name).one_or_none()
    if not role:
        role = Role(name=name, is_system=False, description=name)
        session.add(role); session.flush()
    existing_perm_ids = {rp.permission_id for rp in session.query(RolePermission).filter_by(role_id=role.id)}
    for code in perm_codes:
        p = session.query(Permission).filter_by(code=code).one()
        if p.id not in existing_perm_ids:
            session.add(RolePermission(role_id=role.id, permission_id=p.id))
    session.commit()
    return role


def ensure_user_role_assignment(user: User, role: Role):
    session = get_db()
    if not session.query(UserRole).filter_by(user_id=user.id, role_id=role.id).one_or_none():
        session.add(UserRole(user_id=user.id, role_id=role.id)); session.commit()


def seed_user_with_role(email: str, role_name: str, perm_codes: Iterable[str], base_role: str = 'employee'):
    """High level convenience: user + role(with perms) + assignment."""
    user = ensure_user(email, role=base_role)
    role = ensure_role(role_name, perm_codes)
    ensure_user_role_assignment(user, role)
    return user, role


def login(client, email: str, password: str = 'pw') -> dict:
    resp = client.post('/iam/auth/login', json={'email': email, 'password': password})
    assert resp.status_code == 200, resp.get_json()
    return {'Authorization': f"Bearer {resp.get_json()['access_token']}"}
