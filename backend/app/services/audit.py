from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from app import get_db
from app.models.audit import AuditLog

logger = logging.getLogger(__name__)


def _current_claims():
    """(user id, role) from the active JWT; (None, None) outside an authenticated request."""
    try:
        ident = get_jwt_identity()
        claims = get_jwt() or {}
    except RuntimeError:
        return None, None
    return (int(ident) if ident is not None else None), claims.get('role')


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Stage an audit log entry in the current DB session.

    Parameters:
      action: short action code e.g. REQUEST.SUBMIT, OFFICE.READY, OFFICE.COMPLETE
      entity: optional entity name (BudgetRequest, BudgetFund, ...)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (shallow copied)
    """
    session = get_db()
    actor, role = _current_claims()
    log = AuditLog(
        actor_user_id=actor or 0,
        actor_role=role,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
