import pytest
from app.constants.workflow import APPROVAL_CHAIN, PENDING_STATUSES
from app.errors import InvalidStateError, NotActionableError, NoNextStateError, ValidationError
from app.services.transitions import transition, office_transition, submit_draft_transition


def test_scenario_a_first_step_approve():
    t = transition('pending_teacher', 'approved')
    assert t.from_status == 'pending_teacher'
    assert t.new_status == 'pending_kyoto'


def test_scenario_b_last_step_approve():
    assert transition('pending_chairman', 'approved').new_status == 'approved'


@pytest.mark.parametrize('status', PENDING_STATUSES)
def test_reject_from_any_pending_step_is_absorbing(status):
    t = transition(status, 'rejected', '  insufficient detail ')
    assert t.new_status == 'rejected'
    assert t.comment == 'insufficient detail'


@pytest.mark.parametrize('status', ['approved', 'ready_for_payment', 'completed', 'rejected'])
@pytest.mark.parametrize('decision', ['approved', 'rejected'])
def test_past_chain_not_actionable(status, decision):
    with pytest.raises(NotActionableError):
        transition(status, decision)


def test_unknown_status_has_no_next_state():
    with pytest.raises(NoNextStateError) as ei:
        transition('draft', 'approved')
    assert isinstance(ei.value, InvalidStateError)


def test_draft_cannot_be_rejected():
    with pytest.raises(NotActionableError):
        transition('draft', 'rejected')


def test_unknown_decision():
    with pytest.raises(ValidationError) as ei:
        transition('pending_teacher', 'maybe')
    assert 'action' in ei.value.field_errors


@pytest.mark.parametrize('decision,comment,field', [
    (1, None, 'action'),
    (['approved'], None, 'action'),
    ('approved', 5, 'comment'),
])
def test_non_text_decision_input(decision, comment, field):
    with pytest.raises(ValidationError) as ei:
        transition('pending_teacher', decision, comment)
    assert field in ei.value.field_errors


def test_full_chain_sequence():
    status = APPROVAL_CHAIN[0].status
    seen = [status]
    while status != 'approved':
        status = transition(status, 'approved').new_status
        seen.append(status)
    assert seen == [*PENDING_STATUSES, 'approved']


def test_office_transitions_need_exact_predecessor():
    assert office_transition('approved', 'ready_for_payment') == 'ready_for_payment'
    assert office_transition('ready_for_payment', 'completed') == 'completed'
    with pytest.raises(InvalidStateError):
        office_transition('approved', 'completed')
    with pytest.raises(InvalidStateError):
        office_transition('pending_chairman', 'ready_for_payment')
    with pytest.raises(InvalidStateError):
        office_transition('approved', 'rejected')


def test_submit_draft_transition():
    assert submit_draft_transition('draft') == 'pending_teacher'
    with pytest.raises(InvalidStateError):
        submit_draft_transition('pending_teacher')
