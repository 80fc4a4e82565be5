from __future__ import annotations
"""Audit logging decorator for route handlers.

Usage:

@audit_log('REQUEST.SUBMIT', entity='BudgetRequest', entity_id_key='id', meta_keys=['amount', 'status'])
def create_request():
    ... return {'id': req.id, 'amount': req.amount, 'status': req.status}, 201

@audit_log('OFFICE.READY', entity='BudgetRequest', entity_id_arg='request_id',
           diff_keys=['status'], pre_fetch=lambda a, kw: _prefetch_status(kw.get('request_id')))
def ready(request_id): ...

Parameters:
  action: audit action code
  entity: optional entity label
  entity_id_key: key in the returned JSON whose value becomes entity_id
  entity_id_arg: view kwarg used for entity_id when the key is absent
  meta_keys: keys projected from the returned JSON into meta
  meta_builder: callable(data, rv, args, kwargs) -> dict; overrides meta_keys
  diff_keys / pre_fetch: snapshot before the handler runs, record before/after pairs

Only successful (status < 400) responses are audited. Handlers that raise are not
audited. A failure inside the decorator is logged and never changes the response.
"""
import logging
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional

from app import get_db
from app.services.audit import add_audit

logger = logging.getLogger(__name__)


def _split_rv(rv: Any):
    """Return (json payload, status code) from a view return value."""
    if isinstance(rv, tuple) and rv:
        status = rv[1] if len(rv) > 1 and isinstance(rv[1], int) else 200
        return rv[0], status
    return rv, 200


def _diff(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    changes = {}
    for k in keys:
        if k in before and k in after and before[k] != after[k]:
            changes[k] = {'before': before[k], 'after': after[k]}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before = None
            if diff_keys and pre_fetch:
                try:
                    before = pre_fetch(args, kwargs)
                except Exception:
                    logger.warning('audit pre_fetch failed for %s', action, exc_info=True)
            rv = fn(*args, **kwargs)
            try:
                data, status = _split_rv(rv)
                if status >= 400:
                    return rv
                if not isinstance(data, dict):
                    data = {}
                entity_id = data.get(entity_id_key) if entity_id_key else None
                if entity_id is None and entity_id_arg:
                    entity_id = kwargs.get(entity_id_arg)
                if meta_builder:
                    meta = meta_builder(data, rv, args, kwargs)
                else:
                    meta = {k: data.get(k) for k in (meta_keys or ()) if k in data}
                if diff_keys and isinstance(before, dict):
                    changes = _diff(before, data, diff_keys)
                    if changes:
                        meta = dict(meta or {}, changes=changes)
                add_audit(action, entity, entity_id, meta)
                get_db().commit()
            except Exception:
                logger.warning('audit write failed for %s', action, exc_info=True)
                get_db().rollback()
            return rv
        return wrapper
    return outer
