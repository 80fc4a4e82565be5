from __future__ import annotations
"""Progress projection for the approval timeline.

Derived on every call from the stored status and the approval trail; nothing is
persisted. Records only need `approver_role`, `decision`, `comment`, `created_at`.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from app.constants.workflow import (
    APPROVAL_CHAIN, DECISION_APPROVED, DECISION_REJECTED, Step,
    STATUS_LABELS, completed_step_index,
)

STEP_DONE = 'done'
STEP_CURRENT = 'current'
STEP_REJECTED = 'rejected'
STEP_WAITING = 'waiting'


@dataclass(frozen=True)
class StepState:
    index: int
    step: Step
    state: str
    comment: Optional[str] = None
    decided_at: Optional[datetime] = None
    approver_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'status': self.step.status,
            'role': self.step.role,
            'label': self.step.label,
            'state': self.state,
            'comment': self.comment,
            'decided_at': self.decided_at.isoformat() if self.decided_at else None,
            'approver_id': self.approver_id,
        }


def _latest_by_role(records: Iterable[Any], decision: str) -> Dict[str, Any]:
    ordered = sorted(records, key=lambda r: (r.created_at is None, r.created_at or datetime.min, getattr(r, 'id', 0) or 0))
    latest: Dict[str, Any] = {}
    for r in ordered:
        if r.decision == decision:
            latest[r.approver_role] = r
    return latest


def project(request_status: str, records: Iterable[Any]) -> List[StepState]:
    records = list(records)
    rejected = _latest_by_role(records, DECISION_REJECTED)
    approved = _latest_by_role(records, DECISION_APPROVED)
    current_idx = completed_step_index(request_status)
    out: List[StepState] = []
    for idx, step in enumerate(APPROVAL_CHAIN):
        rec = None
        if step.role in rejected:
            state, rec = STEP_REJECTED, rejected[step.role]
        elif step.role in approved:
            state, rec = STEP_DONE, approved[step.role]
        elif idx == current_idx:
            state = STEP_CURRENT
        else:
            state = STEP_WAITING
        out.append(StepState(
            index=idx,
            step=step,
            state=state,
            comment=getattr(rec, 'comment', None) if rec else None,
            decided_at=getattr(rec, 'created_at', None) if rec else None,
            approver_id=getattr(rec, 'approver_id', None) if rec else None,
        ))
    return out


def progress_payload(request_id: int, request_status: str, records: Iterable[Any]) -> Dict[str, Any]:
    steps = project(request_status, records)
    return {
        'id': request_id,
        'status': request_status,
        'status_label': STATUS_LABELS.get(request_status, request_status),
        'completed_step_index': completed_step_index(request_status),
        'steps': [s.to_dict() for s in steps],
    }


__all__ = ['STEP_DONE', 'STEP_CURRENT', 'STEP_REJECTED', 'STEP_WAITING', 'StepState', 'project', 'progress_payload']
