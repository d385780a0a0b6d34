from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended.exceptions import JWTExtendedException
from backoffice import get_db
from backoffice.models.audit import AuditLog
from backoffice.services.grants import current_principal


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[Any] = None, changes: Optional[Dict[str, Any]] = None):
    """Stage an audit row for a role or grant change in the current DB session.

    The actor is the principal of the current request; outside a JWT-protected
    request (seed scripts) the row is attributed to actor 0.
    Committing is left to the caller's transaction.
    """
    try:
        principal = current_principal()
    except (JWTExtendedException, RuntimeError, KeyError):
        principal = None
    log = AuditLog(
        actor_user_id=(principal.id if principal and principal.id is not None else 0),
        actor_role=principal.role.value if principal else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        actor_grants=sorted(principal.granted) if principal else [],
        changes=changes or {},
    )
    get_db().add(log)
    return log
