from betpay.core import state_machine as sm
from betpay.core.errors import GENERIC_MISSING_DATA, MissingDataError, StepTransitionError, ValidationError
from betpay.core.validation import draft_errors
from betpay.observability.logging import log
from betpay.store.models import WizardSession


def require_complete(session: WizardSession) -> None:
    d = session.draft
    missing = [name for name, v in (
        ("platform", d.platform),
        ("accountId", d.accountId),
        ("network", d.network),
        ("phone", d.phone),
    ) if v is None]
    if missing:
        raise MissingDataError(f"{GENERIC_MISSING_DATA}: {', '.join(missing)}")


def open_gate(session: WizardSession) -> WizardSession:
    """
    Freeze the draft for display and enter CONFIRMING. Every step must hold a
    valid value; there is no other way into the gate.
    """
    require_complete(session)
    errors = draft_errors(session)
    if errors:
        session.fieldErrors = errors
        raise ValidationError(errors)

    d = session.draft
    session.confirmation = {
        "kind": session.kind,
        "platformName": d.platform.name,
        "userAppId": d.accountId.userAppId,
        "networkName": d.network.publicName,
        "phone": d.phone.phone,
        "amount": str(d.amount),
        "withdrawalCode": d.withdrawalCode if session.kind == sm.KIND_WITHDRAWAL else None,
    }
    session.state = sm.CONFIRMING
    session.lastError = None
    log(event="wizard_confirmation_opened", sessionId=session.sessionId, kind=session.kind)
    return session


def cancel_gate(session: WizardSession) -> WizardSession:
    """
    Close the gate and return to the amount step with the draft untouched.
    Closing while a submission is in flight does not cancel the remote call;
    its result is discarded when it arrives. The in-flight flag is released
    here, so a later confirm starts a new attempt.
    """
    if session.state not in (sm.CONFIRMING, sm.SUBMITTING):
        raise StepTransitionError(f"cancel not allowed in state {session.state}")
    if session.state == sm.SUBMITTING or session.submitting:
        log(event="wizard_gate_closed_inflight", sessionId=session.sessionId,
            attempt=session.submissionAttempts)
    session.submitting = False
    session.confirmation = None
    session.step = sm.LAST_STEP
    session.state = sm.step_state(sm.LAST_STEP)
    return session
