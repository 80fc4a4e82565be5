from __future__ import annotations
from flask import Blueprint, request, abort
from sqlalchemy import select
from app import get_db
from app.constants.roles import OFFICE_ROLES, ROLE_LABELS
from app.constants.workflow import APPROVAL_CHAIN, OFFICE_PREDECESSOR, STATUS_LABELS, WORKFLOW_GRAPH
from app.decorators.audit import audit_log
from app.decorators.auth import require_auth, require_roles
from app.models.fund import BudgetFund
from app.models.item_category import BudgetItemCategory
from app.utils.listing import cached_json, compute_etag, iso_z, latest_timestamp
from app.utils.validation import optional_str, require_json_object

ref_bp = Blueprint('reference', __name__)


def _fund_json(f: BudgetFund):
    return {'id': f.id, 'name': f.name, 'year': f.year, 'description': f.description, 'is_active': f.is_active}


@ref_bp.route('/funds', methods=['GET', 'HEAD'])
@require_auth
def list_funds():
    q = get_db().query(BudgetFund)
    if request.args.get('include_inactive') not in ('1', 'true'):
        q = q.filter(BudgetFund.is_active.is_(True))
    rows = q.order_by(BudgetFund.year.desc(), BudgetFund.name.asc()).all()
    latest = latest_timestamp(f.updated_at for f in rows)
    return cached_json({'data': [_fund_json(f) for f in rows]}, compute_etag([f.id for f in rows], iso_z(latest)), latest)


@ref_bp.post('/funds')
@require_roles(*OFFICE_ROLES)
@audit_log('FUND.CREATE', entity='BudgetFund', entity_id_key='id', meta_keys=['name', 'year'])
def create_fund():
    data = require_json_object(request.get_json(silent=True) or {})
    name = optional_str(data, 'name')
    try:
        year = int(data.get('year'))
    except (TypeError, ValueError):
        abort(400, description='year must be int')
    if not name:
        abort(400, description='name required')
    session = get_db()
    if session.execute(select(BudgetFund).where(BudgetFund.name == name)).scalar_one_or_none():
        abort(400, description='fund exists')
    f = BudgetFund(name=name, year=year, description=data.get('description'))
    session.add(f)
    session.commit()
    return _fund_json(f), 201


@ref_bp.get('/item-categories')
@require_auth
def list_item_categories():
    """Previously used item names for a department, most used first."""
    department = (request.args.get('department') or '').strip()
    if not department:
        abort(400, description='department required')
    q = get_db().query(BudgetItemCategory).filter(BudgetItemCategory.department == department)
    year = request.args.get('year')
    if year:
        try:
            q = q.filter(BudgetItemCategory.year == int(year))
        except ValueError:
            abort(400, description='year invalid')
    rows = q.order_by(BudgetItemCategory.use_count.desc(), BudgetItemCategory.name.asc()).limit(50).all()
    return {'data': [
        {'name': c.name, 'unit_price': c.unit_price, 'year': c.year, 'use_count': c.use_count} for c in rows
    ]}


@ref_bp.get('/workflow')
def workflow_definition():
    return {
        'chain': [{'index': i, 'status': s.status, 'role': s.role, 'label': s.label} for i, s in enumerate(APPROVAL_CHAIN)],
        'office_steps': [{'from': src, 'to': dst} for dst, src in OFFICE_PREDECESSOR.items()],
        'transitions': {k: sorted(v) for k, v in WORKFLOW_GRAPH.items()},
        'status_labels': STATUS_LABELS,
        'role_labels': ROLE_LABELS,
    }
