from __future__ import annotations
"""Dashboard aggregates over the budget requests an actor can see."""
from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy import func

from app.constants.roles import is_admin_role
from app.constants.workflow import PENDING_STATUSES, STATUS_COMPLETED, TERMINAL_STATUSES
from app.models.budget_request import BudgetRequest
from app.services.policy import filter_visible


def summarize(rows: Iterable[Tuple[str, int, int]]) -> Dict[str, int]:
    """Fold (status, count, amount) groups into the dashboard figures.

    reserved_amount covers every request still holding budget, i.e. anything not
    completed or rejected (drafts and fully approved requests included).
    """
    out = {'pending_count': 0, 'pending_amount': 0, 'used_amount': 0, 'reserved_amount': 0}
    for status, count, amount in rows:
        amount = int(amount or 0)
        if status in PENDING_STATUSES:
            out['pending_count'] += int(count)
            out['pending_amount'] += amount
        if status == STATUS_COMPLETED:
            out['used_amount'] += amount
        if status not in TERMINAL_STATUSES:
            out['reserved_amount'] += amount
    return out


def department_list(session) -> List[str]:
    rows = session.query(BudgetRequest.organization).distinct().all()
    return sorted({org for (org,) in rows if org})


def request_summary(session, actor) -> Dict[str, Any]:
    q = session.query(BudgetRequest.status, func.count(BudgetRequest.id), func.sum(BudgetRequest.amount))
    q = filter_visible(q, actor, BudgetRequest).group_by(BudgetRequest.status)
    body: Dict[str, Any] = summarize(q.all())
    if is_admin_role(actor.role):
        body['departments'] = department_list(session)
    return body


__all__ = ['summarize', 'department_list', 'request_summary']
