from __future__ import annotations
"""Office disbursement steps: approved -> ready_for_payment -> completed.

Gated by office roles and an exact predecessor status; uses the same transition graph
and conditional status write as the approver chain.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app.constants.workflow import STATUS_READY_FOR_PAYMENT, STATUS_COMPLETED
from app.errors import NotFoundError
from app.services.notifications import send_notification
from app.services.policy import assert_office_role
from app.services.store import RecordStore, SqlRecordStore
from app.services.transitions import office_transition
from app.services.views import invalidate, invalidate_request_views

logger = logging.getLogger(__name__)


@dataclass
class OfficeResult:
    request_id: int
    previous_status: str
    new_status: str
    notified: Optional[bool] = None

    def to_dict(self):
        return {
            'success': True,
            'id': self.request_id,
            'previous_status': self.previous_status,
            'status': self.new_status,
            'notified': self.notified,
        }


def _advance(request_id: int, actor, target: str, store: RecordStore, invalidate_fn):
    req = store.get_request_by_id(request_id)
    if req is None:
        raise NotFoundError('Budget request not found')
    assert_office_role(actor.role)
    previous = req.status
    office_transition(previous, target)
    store.update_request_status(request_id, target, expected_status=previous)
    invalidate_request_views(request_id, include_office=True, invalidate_fn=invalidate_fn)
    return req, previous


def mark_ready_for_payment(
    request_id: int,
    actor,
    *,
    store: Optional[RecordStore] = None,
    notify: Callable[..., bool] = send_notification,
    invalidate_fn: Callable[[str], None] = invalidate,
) -> OfficeResult:
    store = store or SqlRecordStore()
    req, previous = _advance(request_id, actor, STATUS_READY_FOR_PAYMENT, store, invalidate_fn)
    result = OfficeResult(request_id, previous, STATUS_READY_FOR_PAYMENT)
    owner = getattr(req, 'owner', None)
    if owner is not None:
        name = owner.name or '申請者'
        try:
            result.notified = notify(
                to=owner.email or 'unknown@example.com',
                subject=f'【現金準備完了】{req.title}',
                body=f'{name}様\n\n「{req.title}」の現金準備ができました。\n事務室までお越しください。\n\n--- School Budget Flow',
            )
        except Exception:
            logger.warning('cash-ready notification failed for request %s', request_id, exc_info=True)
            result.notified = False
    return result


def mark_completed(
    request_id: int,
    actor,
    *,
    store: Optional[RecordStore] = None,
    invalidate_fn: Callable[[str], None] = invalidate,
) -> OfficeResult:
    store = store or SqlRecordStore()
    req, previous = _advance(request_id, actor, STATUS_COMPLETED, store, invalidate_fn)
    logger.info('disbursed: "%s" (%s) completed by user %s', req.title, request_id, actor.id)
    return OfficeResult(request_id, previous, STATUS_COMPLETED)


__all__ = ['OfficeResult', 'mark_ready_for_payment', 'mark_completed']
