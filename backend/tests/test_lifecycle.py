import pytest
from app.errors import (
    AuditWriteWarning, ConcurrentModificationError, ForbiddenError, InvalidStateError,
    NotFoundError, PersistenceError,
)
from app.services.lifecycle import act
from tests.test_lifecycle_helpers import InMemoryStore, store_unavailable


def _act(store, request_id, role, decision='approved', comment=None, actor_id=7):
    paths = []
    result = act(request_id, role, actor_id, decision, comment, store=store, invalidate_fn=paths.append)
    return result, paths


def test_scenario_a_teacher_approves():
    store = InMemoryStore(); store.add(1, 'pending_teacher')
    result, paths = _act(store, 1, 'teacher')
    assert result.success
    assert result.new_status == 'pending_kyoto'
    assert store.requests[1].status == 'pending_kyoto'
    assert len(store.approvals) == 1
    assert store.approvals[0].approver_role == 'teacher'
    assert result.approval_id == 1
    assert paths == ['/requests/1', '/']


def test_scenario_b_chairman_final_approval():
    store = InMemoryStore(); store.add(2, 'pending_chairman')
    result, _ = _act(store, 2, 'chairman')
    assert result.new_status == 'approved'
    assert result.to_dict()['status'] == 'approved'


def test_scenario_c_kyoto_rejects_with_comment():
    store = InMemoryStore(); store.add(3, 'pending_kyoto')
    result, _ = _act(store, 3, 'kyoto', 'rejected', 'insufficient detail', actor_id=42)
    assert result.new_status == 'rejected'
    assert len(store.approvals) == 1
    rec = store.approvals[0]
    assert (rec.approver_role, rec.decision, rec.comment, rec.approver_id) == ('kyoto', 'rejected', 'insufficient detail', 42)


def test_scenario_d_wrong_role_changes_nothing():
    store = InMemoryStore(); store.add(4, 'pending_teacher')
    with pytest.raises(ForbiddenError) as ei:
        _act(store, 4, 'principal')
    assert ei.value.required_role == 'teacher'
    assert store.requests[4].status == 'pending_teacher'
    assert store.approvals == []
    assert store.update_calls == 0


def test_scenario_e_already_approved():
    store = InMemoryStore(); store.add(5, 'approved')
    with pytest.raises(InvalidStateError):
        _act(store, 5, 'chairman')
    assert store.update_calls == 0


def test_missing_request():
    with pytest.raises(NotFoundError):
        _act(InMemoryStore(), 999, 'teacher')


def test_status_write_failure_is_fatal():
    store = InMemoryStore(fail_update=store_unavailable()); store.add(6, 'pending_teacher')
    with pytest.raises(PersistenceError) as ei:
        _act(store, 6, 'teacher')
    assert ei.value.code == 503
    assert store.approvals == []
    assert store.requests[6].status == 'pending_teacher'


def test_audit_write_failure_is_soft_warning():
    store = InMemoryStore(fail_insert=RuntimeError('disk full')); store.add(7, 'pending_principal')
    result, paths = _act(store, 7, 'principal')
    assert result.success
    assert store.requests[7].status == 'pending_office'
    assert isinstance(result.warning, AuditWriteWarning)
    assert isinstance(result.warning.cause, RuntimeError)
    body = result.to_dict()
    assert body['warning'] == result.warning.message
    assert body['approval_id'] is None
    assert paths  # views still refreshed


def test_concurrent_decision_detected():
    store = InMemoryStore(race_to='rejected'); store.add(8, 'pending_office')
    with pytest.raises(ConcurrentModificationError) as ei:
        _act(store, 8, 'office_chief')
    assert ei.value.code == 409
    assert store.requests[8].status == 'rejected'
    assert store.approvals == []


def test_no_double_advance():
    store = InMemoryStore(); store.add(9, 'pending_teacher')
    _act(store, 9, 'teacher')
    with pytest.raises((ForbiddenError, InvalidStateError)):
        _act(store, 9, 'teacher')
    assert store.requests[9].status == 'pending_kyoto'
    assert len(store.approvals) == 1


def test_rejected_is_final_for_everyone():
    store = InMemoryStore(); store.add(10, 'pending_vice_principal')
    _act(store, 10, 'vice_principal', 'rejected')
    for role in ('teacher', 'kyoto', 'vice_principal', 'principal', 'office_chief', 'chairman', 'accounting'):
        with pytest.raises(InvalidStateError):
            _act(store, 10, role)
