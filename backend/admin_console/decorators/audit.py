from __future__ import annotations
"""Audit decorator for role-management views.

@audit_log('ROLE.CREATE', meta_keys=['name'])
def create_role():
    ... return {'id': role.id, 'name': role.name}, 201

The view's JSON payload (first element when a tuple is returned) supplies the
entity id (``entity_id_key``, falling back to the ``entity_id_arg`` path
parameter) and the projected meta keys. Only successful payloads are audited;
failures propagate to the error handler untouched. Audit problems are logged
and never alter the response.
"""

import logging
from functools import wraps
from typing import Any, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from admin_console.services.audit import add_audit
from admin_console import get_db

logger = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def audit_log(
    action: str,
    *,
    entity_id_key: Optional[str] = 'id',
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            rv = fn(*args, **kwargs)
            data = _extract_payload(rv)
            if not isinstance(data, dict):
                data = {}
            entity_id = data.get(entity_id_key) if entity_id_key else None
            if entity_id is None and entity_id_arg:
                entity_id = kwargs.get(entity_id_arg)
            meta = {k: data.get(k) for k in (meta_keys or []) if k in data}
            try:
                add_audit(action, entity_id, meta)
                get_db().commit()
            except SQLAlchemyError:
                logger.exception('Audit write failed for %s', action)
                get_db().rollback()
            return rv
        return wrapper
    return outer
