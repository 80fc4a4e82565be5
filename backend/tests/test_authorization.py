import pytest
from app.constants.roles import ALL_ROLES
from app.constants.workflow import APPROVAL_CHAIN
from app.errors import ForbiddenError, NotActionableError, InvalidStateError
from app.services.identity import Actor
from app.services.policy import (
    can_act, assert_can_act, can_process_payment, assert_office_role, can_view_request,
)


@pytest.mark.parametrize('step', APPROVAL_CHAIN, ids=lambda s: s.status)
def test_only_designated_role_can_act(step):
    for role in ALL_ROLES:
        assert can_act(role, step.status) is (role == step.role)


@pytest.mark.parametrize('status', ['draft', 'approved', 'ready_for_payment', 'completed', 'rejected', 'nope'])
def test_nobody_acts_off_chain(status):
    assert not any(can_act(role, status) for role in ALL_ROLES)


def test_assert_can_act_names_required_role():
    with pytest.raises(ForbiddenError) as ei:
        assert_can_act('principal', 'pending_teacher')
    err = ei.value
    assert err.code == 403
    assert err.required_role == 'teacher'
    assert "'teacher'" in err.description
    assert err.extra['required_role'] == 'teacher'


def test_assert_can_act_terminal_is_not_actionable():
    with pytest.raises(NotActionableError) as ei:
        assert_can_act('chairman', 'approved')
    assert isinstance(ei.value, InvalidStateError)
    assert ei.value.code == 400


def test_assert_can_act_returns_required_role():
    assert assert_can_act('kyoto', 'pending_kyoto') == 'kyoto'


def test_office_payment_rule():
    assert can_process_payment('accounting', 'approved', 'approved')
    assert can_process_payment('office_chief', 'ready_for_payment', 'ready_for_payment')
    assert not can_process_payment('accounting', 'pending_chairman', 'approved')
    assert not can_process_payment('teacher', 'approved', 'approved')
    with pytest.raises(ForbiddenError):
        assert_office_role('principal')
    assert_office_role('accounting')


def test_view_rules():
    owner = Actor(id=10, role='student', department='吹奏楽部')
    same_club = Actor(id=11, role='teacher', department='吹奏楽部')
    other = Actor(id=12, role='student', department='野球部')
    admin = Actor(id=13, role='principal')
    assert can_view_request(owner, 10, '吹奏楽部')
    assert can_view_request(same_club, 10, '吹奏楽部')
    assert not can_view_request(other, 10, '吹奏楽部')
    assert can_view_request(admin, 10, '吹奏楽部')
    assert not can_view_request(Actor(id=14, role='student'), 10, None)
