from __future__ import annotations
from flask import Blueprint
from app import get_db
from app.constants.roles import OFFICE_ROLES
from app.constants.workflow import STATUS_APPROVED, STATUS_READY_FOR_PAYMENT
from app.decorators.audit import audit_log
from app.decorators.auth import require_roles
from app.models.budget_request import BudgetRequest
from app.routes.requests import request_json
from app.services.identity import require_actor
from app.services.office import mark_ready_for_payment, mark_completed
from app.utils.listing import cached_json, compute_etag, iso_z, latest_timestamp

office_bp = Blueprint('office', __name__)


def _prefetch_status(request_id: int):
    r = get_db().get(BudgetRequest, request_id)
    return {'status': r.status} if r else {}


@office_bp.route('/queue', methods=['GET', 'HEAD'])
@require_roles(*OFFICE_ROLES)
def office_queue():
    """Approved requests awaiting cash, and prepared cash awaiting pickup."""
    actor = require_actor()
    session = get_db()
    rows = session.query(BudgetRequest).filter(
        BudgetRequest.status.in_((STATUS_APPROVED, STATUS_READY_FOR_PAYMENT))
    ).order_by(BudgetRequest.updated_at.asc(), BudgetRequest.id.asc()).all()
    to_prepare = [request_json(r, actor) for r in rows if r.status == STATUS_APPROVED]
    to_hand_out = [request_json(r, actor) for r in rows if r.status == STATUS_READY_FOR_PAYMENT]
    latest = latest_timestamp(r.updated_at for r in rows)
    etag = compute_etag([(r.id, r.status) for r in rows], iso_z(latest))
    body = {
        'approved': to_prepare,
        'ready_for_payment': to_hand_out,
        'totals': {
            'approved': sum(r['amount'] for r in to_prepare),
            'ready_for_payment': sum(r['amount'] for r in to_hand_out),
        },
    }
    return cached_json(body, etag, latest)


@office_bp.post('/requests/<int:request_id>/ready')
@require_roles(*OFFICE_ROLES)
@audit_log('OFFICE.READY', entity='BudgetRequest', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_status(kw.get('request_id')), meta_keys=['notified'])
def ready_for_payment(request_id: int):
    result = mark_ready_for_payment(request_id, require_actor())
    return result.to_dict()


@office_bp.post('/requests/<int:request_id>/complete')
@require_roles(*OFFICE_ROLES)
@audit_log('OFFICE.COMPLETE', entity='BudgetRequest', entity_id_key='id', diff_keys=['status'],
           pre_fetch=lambda a, kw: _prefetch_status(kw.get('request_id')))
def complete(request_id: int):
    result = mark_completed(request_id, require_actor())
    return result.to_dict()
