import pytest

from betpay.core.confirmation import cancel_gate, open_gate
from betpay.core.errors import MissingDataError, StepTransitionError, ValidationError


def test_gate_requires_all_fields(session, fill):
    fill(session)
    session.draft.phone = None
    with pytest.raises(MissingDataError):
        open_gate(session)
    assert session.state == "STEP_5"


def test_gate_rejects_invalid_draft(session, fill):
    fill(session, amount="0")
    with pytest.raises(ValidationError) as ei:
        open_gate(session)
    assert "amount" in ei.value.field_errors


def test_gate_snapshot(session, fill):
    fill(session, network_id=2, phone_id=12, amount="750")
    open_gate(session)
    assert session.state == "CONFIRMING"
    assert session.confirmation == {
        "kind": "deposit",
        "platformName": "1xBet",
        "userAppId": "12345",
        "networkName": "Orange Money",
        "phone": "+2250707070707",
        "amount": "750",
        "withdrawalCode": None,
    }


def test_cancel_returns_to_amount_step_with_draft(session, fill):
    fill(session)
    open_gate(session)
    draft = session.draft
    cancel_gate(session)
    assert session.state == "STEP_5"
    assert session.step == 5
    assert session.confirmation is None
    assert session.draft is draft
    assert session.draft.amount == 5000


def test_cancel_outside_gate_rejected(session):
    with pytest.raises(StepTransitionError):
        cancel_gate(session)
