from app.constants.workflow import APPROVAL_CHAIN
from app.services.progress import project, progress_payload, STEP_DONE, STEP_CURRENT, STEP_REJECTED, STEP_WAITING
from tests.test_lifecycle_helpers import record


def states(status, records):
    return [s.state for s in project(status, records)]


def test_fresh_request():
    assert states('pending_teacher', []) == [STEP_CURRENT] + [STEP_WAITING] * 5


def test_midway():
    recs = [record('teacher', 'approved', 0), record('kyoto', 'approved', 5)]
    assert states('pending_vice_principal', recs) == [STEP_DONE, STEP_DONE, STEP_CURRENT, STEP_WAITING, STEP_WAITING, STEP_WAITING]


def test_rejected_midway():
    recs = [record('teacher', 'approved', 0), record('kyoto', 'rejected', 5, comment='insufficient detail')]
    steps = project('rejected', recs)
    assert [s.state for s in steps] == [STEP_DONE, STEP_REJECTED] + [STEP_WAITING] * 4
    assert steps[1].comment == 'insufficient detail'
    assert steps[1].decided_at is not None


def test_all_done_after_full_approval():
    recs = [record(s.role, 'approved', i) for i, s in enumerate(APPROVAL_CHAIN)]
    for status in ('approved', 'ready_for_payment', 'completed'):
        assert states(status, recs) == [STEP_DONE] * len(APPROVAL_CHAIN)


def test_draft_has_no_current_step():
    assert states('draft', []) == [STEP_WAITING] * len(APPROVAL_CHAIN)


def test_payload_shape():
    body = progress_payload(3, 'pending_kyoto', [record('teacher', 'approved', 0, approver_id=9)])
    assert body['id'] == 3
    assert body['completed_step_index'] == 1
    first = body['steps'][0]
    assert first['role'] == 'teacher'
    assert first['state'] == STEP_DONE
    assert first['approver_id'] == 9
    assert first['decided_at'].startswith('2026-04-01T09:00')
    assert body['steps'][1]['state'] == STEP_CURRENT
