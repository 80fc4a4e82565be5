from __future__ import annotations
"""Approve / reject coordinator.

act() sequence (externally visible effects):
  1. load request            -> NotFoundError
  2. authorization check     -> ForbiddenError (names required role) / NotActionableError
  3. transition engine       -> InvalidStateError family
  4. conditional status write -> ConcurrentModificationError / PersistenceError (fatal)
  5. approval record insert  -> failure becomes AuditWriteWarning on the result (non-fatal)
  6. view invalidation       -> best effort

Status write and record insert are separate commits; the status commit stands when
the record insert fails.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Callable, Dict, Any

from app.errors import NotFoundError, AuditWriteWarning
from app.services.policy import assert_can_act
from app.services.store import ApprovalEntry, RecordStore, SqlRecordStore
from app.services.transitions import transition
from app.services.views import invalidate, invalidate_request_views

logger = logging.getLogger(__name__)


@dataclass
class ActResult:
    request_id: int
    previous_status: str
    new_status: str
    decision: str
    approval_id: Optional[int] = None
    warning: Optional[AuditWriteWarning] = None

    @property
    def success(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'success': self.success,
            'id': self.request_id,
            'previous_status': self.previous_status,
            'status': self.new_status,
            'decision': self.decision,
            'approval_id': self.approval_id,
        }
        if self.warning is not None:
            out['warning'] = self.warning.message
        return out


def act(
    request_id: int,
    actor_role: str,
    actor_id: int,
    decision: str,
    comment: Optional[str] = None,
    *,
    store: Optional[RecordStore] = None,
    invalidate_fn: Callable[[str], None] = invalidate,
) -> ActResult:
    store = store or SqlRecordStore()
    req = store.get_request_by_id(request_id)
    if req is None:
        raise NotFoundError('Budget request not found')
    current = req.status
    assert_can_act(actor_role, current)
    step = transition(current, decision, comment)
    store.update_request_status(request_id, step.new_status, expected_status=current)
    logger.info('request %s %s by %s (%s): %s -> %s', request_id, decision, actor_id, actor_role, current, step.new_status)

    result = ActResult(request_id, current, step.new_status, decision)
    try:
        record = store.insert_approval_record(ApprovalEntry(
            request_id=request_id,
            approver_id=actor_id,
            approver_role=actor_role,
            decision=decision,
            comment=step.comment,
        ))
        result.approval_id = getattr(record, 'id', None)
    except Exception as e:
        logger.warning('approval record insert failed for request %s after status change: %s', request_id, e)
        result.warning = AuditWriteWarning(cause=e)

    invalidate_request_views(request_id, invalidate_fn=invalidate_fn)
    return result


__all__ = ['ActResult', 'act']
