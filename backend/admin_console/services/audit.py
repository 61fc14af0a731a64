from __future__ import annotations
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from admin_console import get_db
from admin_console.models.audit import AuditLog


def add_audit(action: str, entity_id: Optional[Any] = None, meta: Optional[Dict[str, Any]] = None):
    """Stage an audit entry for a role change in the current DB session.

    Parameters:
      action: ROLE.CREATE, ROLE.UPDATE, ROLE.STATUS.SET or ROLE.DELETE
      entity_id: id of the affected role
      meta: JSON-safe details (shallow copied)
    """
    session = get_db()
    claims = {}
    try:
        claims = get_jwt() or {}
    except RuntimeError:
        pass  # outside a verified request (seeding, tests) - no actor
    actor = None
    try:
        ident = get_jwt_identity()
        actor = int(ident) if ident is not None else None
    except (RuntimeError, ValueError):
        actor = None
    log = AuditLog(
        actor_user_id=actor or 0,
        actor_role=claims.get('role'),
        action=action,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # caller owns the commit
    return log
