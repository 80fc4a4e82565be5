from __future__ import annotations
from flask import Blueprint, request, abort, current_app, send_from_directory
from app import get_db
from app.constants.workflow import (
    ALL_STATUSES, APPROVAL_CHAIN, STATUS_LABELS, required_role_for_status, completed_step_index,
)
from app.decorators.audit import audit_log
from app.decorators.auth import require_auth
from app.errors import NotFoundError
from app.models.budget_request import BudgetRequest
from app.services.identity import require_actor
from app.services.lifecycle import act
from app.services.policy import assert_can_view, can_act, filter_visible
from app.services.progress import progress_payload
from app.services.store import SqlRecordStore
from app.services.submission import submit_request, submit_draft
from app.services.summary import request_summary
from app.utils.filters import apply_filters
from app.utils.listing import apply_pagination, cached_list_response, cached_json, compute_etag, iso_z, latest_timestamp
from app.utils.sorting import apply_multi_sort
from app.utils.validation import optional_str, require_json_object

req_bp = Blueprint('requests', __name__)

SORTABLE = {
    'title': BudgetRequest.title,
    'amount': BudgetRequest.amount,
    'status': BudgetRequest.status,
    'organization': BudgetRequest.organization,
    'created_at': BudgetRequest.created_at,
    'updated_at': BudgetRequest.updated_at,
    'id': BudgetRequest.id,
}

FILTERS = {
    'status': {'op': lambda q, v: q.filter(BudgetRequest.status == v), 'validate': lambda v: v in ALL_STATUSES},
    'organization': {'op': lambda q, v: q.filter(BudgetRequest.organization == v)},
    'fund_id': {'coerce': int, 'op': lambda q, v: q.filter(BudgetRequest.fund_id == v)},
    'user_id': {'coerce': int, 'op': lambda q, v: q.filter(BudgetRequest.user_id == v)},
}


def request_json(r: BudgetRequest, actor=None):
    body = {
        'id': r.id,
        'user_id': r.user_id,
        'fund_id': r.fund_id,
        'title': r.title,
        'amount': r.amount,
        'reason': r.reason,
        'organization': r.organization,
        'payee': r.payee,
        'line_items': r.line_items or [],
        'attachment_url': r.attachment_url,
        'status': r.status,
        'status_label': STATUS_LABELS.get(r.status, r.status),
        'required_role': required_role_for_status(r.status),
        'completed_step_index': completed_step_index(r.status),
        'created_at': iso_z(r.created_at) or None,
        'updated_at': iso_z(r.updated_at) or None,
    }
    if actor is not None:
        body['can_act'] = can_act(actor.role, r.status)
    return body


def load_visible_request(request_id: int, actor) -> BudgetRequest:
    r = get_db().get(BudgetRequest, request_id)
    if r is None:
        raise NotFoundError('Budget request not found')
    assert_can_view(actor, r)
    return r


def _list(query, actor):
    q = apply_filters(query, FILTERS, request.args)
    q = apply_multi_sort(q, request.args.get('sort'), SORTABLE, BudgetRequest.id, default=[BudgetRequest.created_at.desc()])
    paged_q, total, limit, offset = apply_pagination(q)
    rows = paged_q.all()
    return cached_list_response([request_json(r, actor) for r in rows], total, limit, offset, latest_timestamp(r.updated_at for r in rows))


@req_bp.route('', methods=['GET', 'HEAD'])
@require_auth
def list_requests():
    actor = require_actor()
    q = filter_visible(get_db().query(BudgetRequest), actor, BudgetRequest)
    return _list(q, actor)


@req_bp.route('/pending', methods=['GET', 'HEAD'])
@require_auth
def list_pending_for_me():
    """Requests waiting on the caller's role."""
    actor = require_actor()
    statuses = [s.status for s in APPROVAL_CHAIN if s.role == actor.role]
    q = get_db().query(BudgetRequest).filter(BudgetRequest.status.in_(statuses))
    return _list(q, actor)


@req_bp.get('/summary')
@require_auth
def get_summary():
    """Pending, used and reserved totals over what the caller can see."""
    actor = require_actor()
    return request_summary(get_db(), actor)


@req_bp.post('')
@require_auth
@audit_log('REQUEST.SUBMIT', entity='BudgetRequest', entity_id_key='id', meta_keys=['amount', 'status', 'organization'])
def create_request():
    actor = require_actor()
    if request.is_json:
        form, attachment = require_json_object(request.get_json(silent=True)), None
    else:
        form, attachment = request.form, request.files.get('attachment')
    r = submit_request(actor, form, attachment)
    return request_json(r, actor), 201


@req_bp.route('/<int:request_id>', methods=['GET', 'HEAD'])
@require_auth
def get_request(request_id: int):
    actor = require_actor()
    r = load_visible_request(request_id, actor)
    etag = compute_etag(r.id, r.status, iso_z(r.updated_at), actor.role)
    return cached_json(request_json(r, actor), etag, r.updated_at)


@req_bp.post('/<int:request_id>/decision')
@require_auth
def decide(request_id: int):
    """Approve or reject the pending step: {"action": "approved"|"rejected", "comment": "..."}."""
    actor = require_actor()
    data = require_json_object(request.get_json(silent=True)) if request.is_json else request.form
    action = optional_str(data, 'action')
    if not action:
        abort(400, description='action required')
    result = act(request_id, actor.role, actor.id, action, optional_str(data, 'comment'))
    if result.warning is not None:
        current_app.logger.warning('request %s: %s', request_id, result.warning.message)
    return result.to_dict()


@req_bp.post('/<int:request_id>/submit')
@require_auth
@audit_log('REQUEST.SUBMIT_DRAFT', entity='BudgetRequest', entity_id_key='id', meta_keys=['status'])
def submit_saved_draft(request_id: int):
    actor = require_actor()
    r = submit_draft(request_id, actor)
    return request_json(r, actor)


@req_bp.get('/<int:request_id>/progress')
@require_auth
def get_progress(request_id: int):
    actor = require_actor()
    r = load_visible_request(request_id, actor)
    records = SqlRecordStore().list_approval_records(r.id)
    return progress_payload(r.id, r.status, records)


@req_bp.get('/<int:request_id>/approvals')
@require_auth
def list_approvals(request_id: int):
    actor = require_actor()
    r = load_visible_request(request_id, actor)
    records = SqlRecordStore().list_approval_records(r.id)
    return {'data': [
        {
            'id': a.id,
            'approver_id': a.approver_id,
            'approver_role': a.approver_role,
            'decision': a.decision,
            'comment': a.comment,
            'created_at': iso_z(a.created_at) or None,
        } for a in records
    ]}


@req_bp.get('/<int:request_id>/attachment')
@require_auth
def get_attachment(request_id: int):
    actor = require_actor()
    r = load_visible_request(request_id, actor)
    if not r.attachment_url:
        abort(404)
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], r.attachment_url)
