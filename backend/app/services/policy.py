from __future__ import annotations
"""Authorization rules for budget requests.

Everything here is a pure function of (actor, request status / record); no ambient
role state is consulted.
"""
from typing import Optional
from sqlalchemy import or_

from app.constants.roles import OFFICE_ROLES, is_admin_role, is_office_role
from app.constants.workflow import required_role_for_status
from app.errors import ForbiddenError, NotActionableError


def can_act(actor_role: str, request_status: str) -> bool:
    """True only when actor_role is the designated approver of the pending step."""
    required = required_role_for_status(request_status)
    if required is None:
        return False
    return required == actor_role


def assert_can_act(actor_role: str, request_status: str) -> str:
    """Return the required role, or raise.

    NotActionableError when the status has no approver at all (terminal, approved,
    draft, unknown); ForbiddenError naming the required role otherwise.
    """
    required = required_role_for_status(request_status)
    if required is None:
        raise NotActionableError()
    if actor_role != required:
        raise ForbiddenError(required_role=required, actor_role=actor_role)
    return required


def can_process_payment(actor_role: str, request_status: str, expected_status: str) -> bool:
    """Office steps: role must be an office role and status must equal the predecessor exactly."""
    return is_office_role(actor_role) and request_status == expected_status


def assert_office_role(actor_role: str):
    if not is_office_role(actor_role):
        raise ForbiddenError(required_role=sorted(OFFICE_ROLES), actor_role=actor_role)


def can_view_request(actor, owner_user_id: int, organization: Optional[str]) -> bool:
    if is_admin_role(actor.role):
        return True
    if owner_user_id == actor.id:
        return True
    # Teachers and students see their own department's requests
    return bool(actor.department) and organization == actor.department


def assert_can_view(actor, req):
    if not can_view_request(actor, req.user_id, req.organization):
        raise ForbiddenError('Record access denied')


def filter_visible(query, actor, model):
    """Restrict a request query to what `actor` may see."""
    if is_admin_role(actor.role):
        return query
    clauses = [model.user_id == actor.id]
    if actor.department:
        clauses.append(model.organization == actor.department)
    return query.filter(or_(*clauses))
