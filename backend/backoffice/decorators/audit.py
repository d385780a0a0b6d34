"""Audit decorator for role/grant management endpoints.

@audit_log('ROLE.PERM.REPLACE', entity='Role', entity_id_key='id')
def replace_role_permissions(role_id): ...
    return {'id': role.id, 'permissions': [...], 'changes': {'added': [...], 'removed': [...]}}

The view's JSON payload (first element when a tuple is returned) supplies the
entity id and, under ``changes_key``, the change summary. Only successful
responses (status < 400) are audited.
"""
from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import current_app

from backoffice import get_db
from backoffice.services.audit import add_audit


def _split_rv(rv: Any):
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def audit_log(action: str, *, entity: Optional[str] = None, entity_id_key: Optional[str] = None,
              entity_id_arg: Optional[str] = None, changes_key: str = 'changes'):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            data, status = _split_rv(rv)
            if status >= 400 or not isinstance(data, dict):
                return rv
            entity_id = data.get(entity_id_key) if entity_id_key else None
            if entity_id is None and entity_id_arg:
                entity_id = kwargs.get(entity_id_arg)
            changes = data.get(changes_key)
            if not isinstance(changes, dict):
                changes = {k: data[k] for k in ('name',) if k in data}
            add_audit(action, entity, entity_id, changes)
            session = get_db()
            try:
                session.commit()
            except Exception:
                # The change itself is already committed; losing the audit row must not fail the response
                session.rollback()
                current_app.logger.exception('Failed to persist audit entry for %s', action)
            return rv
        return wrapper
    return outer
