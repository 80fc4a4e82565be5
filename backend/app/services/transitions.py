from __future__ import annotations
"""Pure transition engine for budget request statuses.

`transition` handles approver decisions, `office_transition` the disbursement steps.
Both validate against the one shared graph (WORKFLOW_FSM) and never touch storage.
"""
from dataclasses import dataclass
from typing import Optional

from app.constants.workflow import (
    WORKFLOW_GRAPH, DECISIONS, DECISION_REJECTED, STATUS_REJECTED, STATUS_DRAFT,
    INITIAL_STATUS, NOT_ACTIONABLE_STATUSES, OFFICE_PREDECESSOR, next_status, step_for_status,
)
from app.errors import InvalidStateError, NotActionableError, NoNextStateError, ValidationError
from app.utils.fsm import TransitionValidator

WORKFLOW_FSM = TransitionValidator(WORKFLOW_GRAPH)


@dataclass(frozen=True)
class Transition:
    from_status: str
    new_status: str
    decision: str
    comment: str = ''


def transition(current_status: str, decision: str, comment: Optional[str] = None) -> Transition:
    if comment is not None and not isinstance(comment, str):
        raise ValidationError({'comment': 'Comment must be text'})
    if not isinstance(decision, str) or decision not in DECISIONS:
        raise ValidationError({'action': f"Unknown decision '{decision}'"})
    if current_status in NOT_ACTIONABLE_STATUSES:
        raise NotActionableError()
    if decision == DECISION_REJECTED:
        # Any pending step rejects straight to the absorbing state
        if step_for_status(current_status) is None:
            raise NotActionableError()
        target = STATUS_REJECTED
    else:
        target = next_status(current_status)
        if target is None:
            raise NoNextStateError(f"No next status after '{current_status}'")
    WORKFLOW_FSM.assert_can_transition(current_status, target)
    return Transition(current_status, target, decision, (comment or '').strip())


def office_transition(current_status: str, target_status: str) -> str:
    expected = OFFICE_PREDECESSOR.get(target_status)
    if expected is None:
        raise InvalidStateError(f"'{target_status}' is not an office step")
    if current_status != expected:
        raise InvalidStateError(f"Request must be '{expected}' (current: {current_status})")
    WORKFLOW_FSM.assert_can_transition(current_status, target_status)
    return target_status


def submit_draft_transition(current_status: str) -> str:
    if current_status != STATUS_DRAFT:
        raise InvalidStateError(f"Only drafts can be submitted (current: {current_status})")
    WORKFLOW_FSM.assert_can_transition(current_status, INITIAL_STATUS)
    return INITIAL_STATUS


__all__ = ['WORKFLOW_FSM', 'Transition', 'transition', 'office_transition', 'submit_draft_transition']
