"""Approval relay definition: status codes, the ordered approver chain and lookups.

Everything here is immutable module data and safe to read from any thread.
Status codes are stored in budget_requests.status; never rename silently.

Chain order:
    pending_teacher -> pending_kyoto -> pending_vice_principal -> pending_principal
    -> pending_office -> pending_chairman -> approved
Office side:
    approved -> ready_for_payment -> completed
Any pending step may go straight to rejected.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from app.constants.roles import (
    ROLE_TEACHER, ROLE_KYOTO, ROLE_VICE_PRINCIPAL, ROLE_PRINCIPAL,
    ROLE_OFFICE_CHIEF, ROLE_CHAIRMAN,
)

STATUS_DRAFT = 'draft'
STATUS_PENDING_TEACHER = 'pending_teacher'
STATUS_PENDING_KYOTO = 'pending_kyoto'
STATUS_PENDING_VICE_PRINCIPAL = 'pending_vice_principal'
STATUS_PENDING_PRINCIPAL = 'pending_principal'
STATUS_PENDING_OFFICE = 'pending_office'
STATUS_PENDING_CHAIRMAN = 'pending_chairman'
STATUS_APPROVED = 'approved'
STATUS_READY_FOR_PAYMENT = 'ready_for_payment'
STATUS_COMPLETED = 'completed'
STATUS_REJECTED = 'rejected'

ALL_STATUSES = (
    STATUS_DRAFT,
    STATUS_PENDING_TEACHER, STATUS_PENDING_KYOTO, STATUS_PENDING_VICE_PRINCIPAL,
    STATUS_PENDING_PRINCIPAL, STATUS_PENDING_OFFICE, STATUS_PENDING_CHAIRMAN,
    STATUS_APPROVED, STATUS_READY_FOR_PAYMENT, STATUS_COMPLETED, STATUS_REJECTED,
)

DECISION_APPROVED = 'approved'
DECISION_REJECTED = 'rejected'
DECISIONS = (DECISION_APPROVED, DECISION_REJECTED)


@dataclass(frozen=True)
class Step:
    status: str
    role: str
    label: str


APPROVAL_CHAIN: Tuple[Step, ...] = (
    Step(STATUS_PENDING_TEACHER, ROLE_TEACHER, '担当教員'),
    Step(STATUS_PENDING_KYOTO, ROLE_KYOTO, '教頭'),
    Step(STATUS_PENDING_VICE_PRINCIPAL, ROLE_VICE_PRINCIPAL, '副校長'),
    Step(STATUS_PENDING_PRINCIPAL, ROLE_PRINCIPAL, '校長'),
    Step(STATUS_PENDING_OFFICE, ROLE_OFFICE_CHIEF, '事務長'),
    Step(STATUS_PENDING_CHAIRMAN, ROLE_CHAIRMAN, '理事長'),
)

FINAL_APPROVED_STATUS = STATUS_APPROVED
INITIAL_STATUS = APPROVAL_CHAIN[0].status
PENDING_STATUSES = tuple(s.status for s in APPROVAL_CHAIN)

# Every chain step is complete in these states
FULLY_APPROVED_STATUSES = (STATUS_APPROVED, STATUS_READY_FOR_PAYMENT, STATUS_COMPLETED)
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_REJECTED)
# Past the approver chain: the chain accepts no decision here
NOT_ACTIONABLE_STATUSES = (STATUS_REJECTED,) + FULLY_APPROVED_STATUSES

# Office disbursement: target -> required predecessor
OFFICE_PREDECESSOR: Dict[str, str] = {
    STATUS_READY_FOR_PAYMENT: STATUS_APPROVED,
    STATUS_COMPLETED: STATUS_READY_FOR_PAYMENT,
}

_INDEX_BY_STATUS: Dict[str, int] = {s.status: i for i, s in enumerate(APPROVAL_CHAIN)}


def step_index(status: str) -> Optional[int]:
    return _INDEX_BY_STATUS.get(status)


def step_for_status(status: str) -> Optional[Step]:
    idx = _INDEX_BY_STATUS.get(status)
    return APPROVAL_CHAIN[idx] if idx is not None else None


def required_role_for_status(status: str) -> Optional[str]:
    step = step_for_status(status)
    return step.role if step else None


def next_status(status: str) -> Optional[str]:
    """Status after approving `status`; FINAL_APPROVED_STATUS after the last step, None off-chain."""
    idx = _INDEX_BY_STATUS.get(status)
    if idx is None:
        return None
    if idx == len(APPROVAL_CHAIN) - 1:
        return FINAL_APPROVED_STATUS
    return APPROVAL_CHAIN[idx + 1].status


def completed_step_index(status: str) -> int:
    """How far along the chain `status` is.

    -1                 draft, rejected or unknown (position not derivable)
    i                  waiting on step i; steps before it are done
    len(APPROVAL_CHAIN) every step done (approved, ready_for_payment, completed)
    """
    if status == STATUS_DRAFT:
        return -1
    idx = _INDEX_BY_STATUS.get(status)
    if idx is not None:
        return idx
    if status in FULLY_APPROVED_STATUSES:
        return len(APPROVAL_CHAIN)
    return -1


def build_transition_graph() -> Dict[str, FrozenSet[str]]:
    """Single transition graph shared by the approver chain and the office steps."""
    graph: Dict[str, FrozenSet[str]] = {STATUS_DRAFT: frozenset({INITIAL_STATUS})}
    for step in APPROVAL_CHAIN:
        graph[step.status] = frozenset({next_status(step.status), STATUS_REJECTED})
    for target, predecessor in OFFICE_PREDECESSOR.items():
        graph[predecessor] = frozenset({target})
    for terminal in TERMINAL_STATUSES:
        graph[terminal] = frozenset()
    return graph


WORKFLOW_GRAPH: Dict[str, FrozenSet[str]] = build_transition_graph()

STATUS_LABELS: Dict[str, str] = {
    STATUS_DRAFT: '下書き',
    STATUS_PENDING_TEACHER: '担当教員 承認待ち',
    STATUS_PENDING_KYOTO: '教頭 承認待ち',
    STATUS_PENDING_VICE_PRINCIPAL: '副校長 承認待ち',
    STATUS_PENDING_PRINCIPAL: '校長 承認待ち',
    STATUS_PENDING_OFFICE: '事務長 承認待ち',
    STATUS_PENDING_CHAIRMAN: '理事長 承認待ち',
    STATUS_APPROVED: '全承認完了・引出待ち',
    STATUS_READY_FOR_PAYMENT: '現金用意済み・受取待ち',
    STATUS_COMPLETED: '出納済',
    STATUS_REJECTED: '却下',
}

__all__ = [
    'Step', 'APPROVAL_CHAIN', 'ALL_STATUSES', 'PENDING_STATUSES', 'FULLY_APPROVED_STATUSES',
    'TERMINAL_STATUSES', 'NOT_ACTIONABLE_STATUSES', 'OFFICE_PREDECESSOR', 'DECISIONS',
    'step_index', 'step_for_status', 'required_role_for_status', 'next_status',
    'completed_step_index', 'build_transition_graph', 'WORKFLOW_GRAPH', 'STATUS_LABELS',
]
