"""Reusable test helpers for the approval lifecycle.

Patterns unified:
 - Auth header creation using direct JWT claims (bypassing /login).
 - An in-memory record store with the same four operations as SqlRecordStore, so the
   coordinators can be driven without a database and with injected failures.
 - Walking a request through the whole approver chain over HTTP.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional
from flask_jwt_extended import create_access_token
from app.constants.workflow import APPROVAL_CHAIN
from app.errors import ConcurrentModificationError, PersistenceError
from tests.test_utils_seed import ensure_user

# ---------- Generic Auth Helpers ---------- #

def jwt_headers(user_id: int, role: str, department: Optional[str] = None):
    token = create_access_token(identity=str(user_id), additional_claims={
        'role': role,
        'department': department,
    })
    return {'Authorization': f'Bearer {token}'}


def headers_for(app_instance, user):
    with app_instance.app_context():
        return jwt_headers(user.id, user.role, user.department)


def approver_headers(app_instance) -> Dict[str, Dict[str, str]]:
    """role -> auth headers for one seeded approver per chain step."""
    out = {}
    for step in APPROVAL_CHAIN:
        user = ensure_user(f'approver_{step.role}@example.com', role=step.role)
        out[step.role] = headers_for(app_instance, user)
    return out

# ---------- In-memory store ---------- #

@dataclass
class InMemoryStore:
    requests: Dict[int, SimpleNamespace] = field(default_factory=dict)
    approvals: List[SimpleNamespace] = field(default_factory=list)
    fail_insert: Optional[Exception] = None
    fail_update: Optional[Exception] = None
    # status another actor writes just before our conditional update lands
    race_to: Optional[str] = None
    update_calls: int = 0

    def add(self, request_id: int, status: str, title: str = '備品', owner=None, user_id: int = 1):
        self.requests[request_id] = SimpleNamespace(id=request_id, status=status, title=title, owner=owner, user_id=user_id)
        return self.requests[request_id]

    def get_request_by_id(self, request_id):
        return self.requests.get(request_id)

    def update_request_status(self, request_id, new_status, expected_status=None):
        self.update_calls += 1
        if self.fail_update is not None:
            raise self.fail_update
        req = self.requests[request_id]
        if self.race_to is not None:
            req.status, self.race_to = self.race_to, None
        if expected_status is not None and req.status != expected_status:
            raise ConcurrentModificationError()
        req.status = new_status

    def insert_approval_record(self, entry):
        if self.fail_insert is not None:
            raise self.fail_insert
        rec = SimpleNamespace(
            id=len(self.approvals) + 1,
            request_id=entry.request_id,
            approver_id=entry.approver_id,
            approver_role=entry.approver_role,
            decision=entry.decision,
            comment=entry.comment,
            created_at=entry.decided_at,
        )
        self.approvals.append(rec)
        return rec

    def list_approval_records(self, request_id):
        return [a for a in self.approvals if a.request_id == request_id]


def record(role: str, decision: str, minutes: int = 0, comment: str = '', approver_id: int = 1):
    """Approval record stand-in for progress projection tests."""
    base = datetime(2026, 4, 1, 9, 0, tzinfo=timezone.utc)
    return SimpleNamespace(approver_role=role, decision=decision, comment=comment,
                           created_at=base + timedelta(minutes=minutes), approver_id=approver_id)


def store_unavailable():
    return PersistenceError('Status update failed: OperationalError; please retry')

# ---------- HTTP lifecycle ---------- #

def decide(client, request_id: int, headers, action: str = 'approved', comment: str = ''):
    return client.post(f'/requests/{request_id}/decision', json={'action': action, 'comment': comment}, headers=headers)


def exercise_full_approval(client, request_id: int, headers_by_role: Dict[str, Dict[str, str]]):
    """Approve every chain step in order; returns the last response body."""
    body = None
    for step in APPROVAL_CHAIN:
        resp = decide(client, request_id, headers_by_role[step.role])
        assert resp.status_code == 200, resp.get_json()
        body = resp.get_json()
        assert body['previous_status'] == step.status
    assert body['status'] == 'approved'
    return body


__all__ = [
    'jwt_headers', 'headers_for', 'approver_headers', 'InMemoryStore', 'record', 'store_unavailable',
    'decide', 'exercise_full_approval',
]
