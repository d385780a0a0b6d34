#!/usr/bin/env python
"""Idempotent seed script for the permission catalog & preset roles.

Usage:
    python backend/scripts/seed_authz.py                          # seed normally
    python backend/scripts/seed_authz.py --show-roles             # print role -> permission counts
    python backend/scripts/seed_authz.py --dry-run                # run logic then rollback (no DB changes)
    python backend/scripts/seed_authz.py --validate               # exit 2 on dangling codes / bad preset references
    python backend/scripts/seed_authz.py --export-codes codes.json
    python backend/scripts/seed_authz.py --diff-codes codes.json  # compare a previous export to the catalog
"""
from __future__ import annotations
import os, sys, argparse, textwrap, json
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from backoffice import create_app, get_db, get_permission_catalog  # type: ignore
from backoffice.constants.permissions import ADMIN_ROLE_NAME, ROLE_PRESETS, WILDCARD
from backoffice.models.authz import Base, Role, User, UserRole
from backoffice.services.catalog import all_permission_codes, count_permissions, diff_codes
from backoffice.services.grants import apply_role_presets, find_dangling, sync_catalog
from backoffice.services.policy import Role as BaseRole


def ensure_initial_admin(session):
    admin_role = session.execute(select(Role).where(Role.name==ADMIN_ROLE_NAME)).scalar_one_or_none()
    if not admin_role:
        print(f'[WARN] {ADMIN_ROLE_NAME} role missing; skipping admin user creation')
        return False
    admin_email = os.getenv('SEED_ADMIN_EMAIL', 'admin@example.com')
    if session.execute(select(User).where(User.email==admin_email)).scalar_one_or_none():
        return False
    user = User(name='Administrateur', email=admin_email, role=BaseRole.ADMIN.value, password_hash='')
    user.set_password(os.getenv('SEED_ADMIN_PASSWORD', 'ChangeMe123!'))
    session.add(user)
    session.flush()
    session.add(UserRole(user_id=user.id, role_id=admin_role.id))
    print(f'[INFO] Created initial admin user {admin_email} with temporary password.')
    return True


def build_role_permission_map(session):
    mapping = {}
    for role in session.execute(select(Role)).scalars().all():
        mapping[role.name] = sorted({rp.permission.code for rp in role.permissions})
    return mapping


def print_role_summary(session):
    rows = [(name, len(codes), codes[:8]) for name, codes in build_role_permission_map(session).items()]
    if not rows:
        print('[INFO] No roles present.')
        return
    name_w = max(len(r[0]) for r in rows)
    print(f"{'Role'.ljust(name_w)} | Count | Sample (up to 8)")
    print('-' * (name_w + 40))
    for name, cnt, sample in rows:
        print(f"{name.ljust(name_w)} | {str(cnt).rjust(5)} | {', '.join(sample)}")


def validation_problems(session, catalog):
    problems = []
    for row in find_dangling(session, catalog):
        problems.append(f"Stored code no longer in catalog: {row['code']} ({row['grants']} role grant(s))")
    known = set(all_permission_codes(catalog))
    known.add(WILDCARD)
    for role_name, codes in ROLE_PRESETS.items():
        for code in codes:
            if code not in known:
                problems.append(f"Preset role '{role_name}' references unknown permission code: {code}")
    return problems


def export_codes(catalog, target):
    codes = list(all_permission_codes(catalog))
    if target == '-':
        print(json.dumps(codes, indent=2))
    else:
        with open(target, 'w', encoding='utf-8') as f:
            json.dump(codes, f, indent=2)
        print(f'[INFO] Exported {len(codes)} codes to {target}')


def print_code_diff(catalog, previous_file):
    with open(previous_file, encoding='utf-8') as f:
        previous = json.load(f)
    diff = diff_codes(previous, all_permission_codes(catalog))
    for code in diff['added']:
        print(f'  + {code}')
    for code in diff['removed']:
        print(f'  - {code}')
    print(f"[INFO] Catalog diff vs {previous_file}: {len(diff['added'])} added, {len(diff['removed'])} removed")
    return diff


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description='Seed permission catalog & preset roles',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_authz.py\n  dry run: seed_authz.py --dry-run\n  show roles: seed_authz.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print role permission counts after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    p.add_argument('--validate', action='store_true', help='Report dangling stored codes & bad preset references; exits 2 on problems')
    p.add_argument('--export-codes', nargs='?', const='-', metavar='FILE', help='Export catalog codes as JSON (to FILE or stdout if omitted)')
    p.add_argument('--diff-codes', metavar='FILE', help='Show codes added/removed since a previous --export-codes file')
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM permissions LIMIT 1'))
        except Exception:
            # Bootstrap without migrations; prefer `alembic upgrade head` in real environments
            session.rollback()
            Base.metadata.create_all(session.get_bind())
        finally:
            session.commit()

    with app.app_context():
        session = get_db()
        catalog = get_permission_catalog()
        try:
            synced = sync_catalog(session, catalog)
            created_r = apply_role_presets(session)
            ensure_initial_admin(session)
            if args.validate:
                problems = validation_problems(session, catalog)
                if problems:
                    print('\n[VALIDATION] FAIL:')
                    for p in problems:
                        print(' -', p)
                    session.rollback()
                    sys.exit(2)
                print(f'[VALIDATION] OK: {count_permissions(catalog)} catalog codes, no dangling grants.')
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Permissions would create: {synced['created']}, update: {synced['updated']}, Roles would create: {created_r}")
            else:
                session.commit()
                print(f"[DONE] Permissions created: {synced['created']}, updated: {synced['updated']}, Roles created: {created_r}")
            if args.show_roles:
                print('\nRole Permission Summary:')
                print_role_summary(session)
            if args.export_codes is not None:
                export_codes(catalog, args.export_codes)
            if args.diff_codes:
                print_code_diff(catalog, args.diff_codes)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

if __name__ == '__main__':
    main()
