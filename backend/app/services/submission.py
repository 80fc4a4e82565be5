from __future__ import annotations
"""Budget request submission.

Validates the form, recomputes every line item amount and the request total on the
server (client totals are ignored), stores the optional attachment and inserts the
request in the first pending status (or draft). Item names are then accumulated into
the per-department category master for form suggestions.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.constants.workflow import INITIAL_STATUS, STATUS_DRAFT
from app.errors import ValidationError, PersistenceError, NotFoundError, ForbiddenError
from app.models.budget_request import BudgetRequest
from app.models.fund import BudgetFund
from app.models.item_category import BudgetItemCategory
from app.services import attachments
from app.services.store import SqlRecordStore
from app.services.transitions import submit_draft_transition
from app.services.views import invalidate, invalidate_request_views

logger = logging.getLogger(__name__)

# BIGINT column range
MAX_AMOUNT = 2 ** 63 - 1

REQUIRED_FIELDS = {
    'organization': '申請団体名を入力してください。',
    'title': '事由（件名）を入力してください。',
    'payee': '支払先・振込先を入力してください。',
    'fund_id': '予算科目を選択してください。',
    'reason': '理由・詳細を入力してください。',
}


def _as_int(value) -> Optional[int]:
    """Exact integers only: JSON ints or ASCII digit strings. Floats and exponents are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def parse_line_items(raw) -> Tuple[List[Any], Optional[str]]:
    if raw is None or raw == '':
        return [], None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return [], '品目データの形式が不正です。'
    if not isinstance(raw, list):
        return [], '品目データの形式が不正です。'
    return raw, None


def normalize_line_items(items: List[Any]) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """Drop unnamed rows, validate the rest and recompute amount = quantity * unit_price."""
    named = [it for it in items if isinstance(it, dict) and str(it.get('name') or '').strip()]
    if not named:
        return [], '最低1つ以上の品目を入力してください。'
    out: List[Dict[str, Any]] = []
    for it in named:
        name = str(it['name']).strip()
        quantity = _as_int(it.get('quantity'))
        unit_price = _as_int(it.get('unit_price'))
        if quantity is None or unit_price is None or quantity <= 0 or unit_price <= 0:
            return [], f'品目「{name}」の数量と単価を正しく入力してください。'
        out.append({'name': name, 'quantity': quantity, 'unit_price': unit_price, 'amount': quantity * unit_price})
    return out, None


def compute_total(items: List[Dict[str, Any]]) -> int:
    return sum(it['quantity'] * it['unit_price'] for it in items)


def validate_submission(form: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Return (cleaned values, field errors)."""
    errors: Dict[str, str] = {}
    cleaned: Dict[str, Any] = {}
    for key, message in REQUIRED_FIELDS.items():
        value = form.get(key)
        value = str(value).strip() if value is not None else ''
        if not value:
            errors[key] = message
        cleaned[key] = value
    if 'fund_id' not in errors:
        fund_id = _as_int(cleaned['fund_id'])
        if fund_id is None:
            errors['fund_id'] = REQUIRED_FIELDS['fund_id']
        cleaned['fund_id'] = fund_id

    raw_items, parse_error = parse_line_items(form.get('line_items'))
    items: List[Dict[str, Any]] = []
    if parse_error:
        errors['line_items'] = parse_error
    else:
        items, item_error = normalize_line_items(raw_items)
        if item_error:
            errors['line_items'] = item_error
    total = compute_total(items)
    if total <= 0:
        errors['amount'] = '合計金額が0円です。品目の数量と単価を入力してください。'
    elif total > MAX_AMOUNT:
        errors['amount'] = '合計金額が上限を超えています。'
    cleaned['line_items'] = items
    cleaned['amount'] = total
    cleaned['draft'] = _truthy(form.get('draft'))
    return cleaned, errors


def record_item_categories(session, items: List[Dict[str, Any]], department: str, year: Optional[int] = None) -> None:
    """Upsert item names into the category master; failures are logged only."""
    year = year or datetime.now().year
    try:
        for it in items:
            existing = session.execute(select(BudgetItemCategory).where(
                BudgetItemCategory.name == it['name'],
                BudgetItemCategory.department == department,
                BudgetItemCategory.year == year,
            )).scalar_one_or_none()
            if existing:
                existing.unit_price = it['unit_price']
                existing.use_count = (existing.use_count or 0) + 1
            else:
                session.add(BudgetItemCategory(name=it['name'], department=department, unit_price=it['unit_price'], year=year, use_count=1))
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning('item category update skipped for %s: %s', department, e)


def submit_request(actor, form: Mapping[str, Any], attachment=None, session=None) -> BudgetRequest:
    if session is None:
        from app import get_db
        session = get_db()
    cleaned, errors = validate_submission(form)

    data = None
    if attachments.has_file(attachment):
        data, file_error = attachments.read_and_validate(attachment)
        if file_error:
            errors['attachment'] = file_error
    if 'fund_id' not in errors and session.get(BudgetFund, cleaned['fund_id']) is None:
        errors['fund_id'] = '予算科目が見つかりません。'
    if errors:
        raise ValidationError(errors)

    attachment_ref = attachments.save_attachment(attachment.filename, data) if data is not None else None
    req = BudgetRequest(
        user_id=actor.id,
        fund_id=cleaned['fund_id'],
        title=cleaned['title'],
        amount=cleaned['amount'],
        reason=cleaned['reason'],
        organization=cleaned['organization'],
        payee=cleaned['payee'],
        line_items=cleaned['line_items'],
        attachment_url=attachment_ref,
        status=STATUS_DRAFT if cleaned['draft'] else INITIAL_STATUS,
    )
    try:
        session.add(req)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        if attachment_ref:
            attachments.remove_attachment(attachment_ref)
        raise PersistenceError(f'Request could not be saved: {e.__class__.__name__}') from e
    logger.info('request %s submitted by user %s amount=%s status=%s', req.id, actor.id, req.amount, req.status)

    record_item_categories(session, cleaned['line_items'], cleaned['organization'])
    return req


def submit_draft(request_id: int, actor, store=None, invalidate_fn=None) -> BudgetRequest:
    """Owner sends a saved draft into the approver chain."""
    store = store or SqlRecordStore()
    req = store.get_request_by_id(request_id)
    if req is None:
        raise NotFoundError('Budget request not found')
    if req.user_id != actor.id:
        raise ForbiddenError('Only the requester can submit a draft')
    target = submit_draft_transition(req.status)
    store.update_request_status(request_id, target, expected_status=req.status)
    invalidate_request_views(request_id, invalidate_fn=invalidate_fn or invalidate)
    return req


__all__ = [
    'submit_draft', 'parse_line_items', 'normalize_line_items', 'compute_total', 'validate_submission',
    'record_item_categories', 'submit_request',
]
