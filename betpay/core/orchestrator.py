import uuid
from typing import Callable, Optional

from betpay.core import state_machine as sm
from betpay.core.errors import WizardNotFound, failure_message
from betpay.core.submission import SubmissionCoordinator
from betpay.core.wizard import start_wizard
from betpay.observability.logging import log
from betpay.settings import settings
from betpay.store.models import Failure, WizardSession
from betpay.store.session_repo import discard_wizard, load_wizard, save_wizard
from betpay.utils.lock import session_lock

# Lock attempts (0.1s apart) when recording a submission outcome.
RESULT_LOCK_RETRIES = 50


def new_session_id() -> str:
    return uuid.uuid4().hex


def create_wizard(kind: str, api) -> WizardSession:
    session = start_wizard(new_session_id(), kind, api)
    save_wizard(session)
    return session


def _load_or_raise(session_id: str) -> WizardSession:
    session = load_wizard(session_id)
    if session is None:
        raise WizardNotFound(session_id)
    return session


def mutate_wizard(session_id: str, fn: Callable[[WizardSession], object]) -> WizardSession:
    """
    Load, apply `fn`, save; single writer per session. The session is saved
    even when `fn` raises so per-field errors and toasts reach the client.
    """
    with session_lock(session_id):
        session = _load_or_raise(session_id)
        try:
            fn(session)
        finally:
            save_wizard(session)
        return session


def read_wizard(session_id: str) -> WizardSession:
    with session_lock(session_id):
        return _load_or_raise(session_id)


def abandon_wizard(session_id: str) -> None:
    """Navigation away: the draft goes with the session."""
    with session_lock(session_id):
        discard_wizard(session_id)
    log(event="wizard_abandoned", sessionId=session_id)


def run_submission(session_id: str, coordinator: SubmissionCoordinator) -> Optional[WizardSession]:
    """
    Perform the remote call outside the lock, then apply the result to the
    session as it is now (it may have been closed meanwhile).
    """
    session = load_wizard(session_id)
    if session is None or not session.submitting:
        log(event="submission_run_skipped", sessionId=session_id)
        return session

    attempt = session.submissionAttempts
    result, response = coordinator.call_remote(session)

    # The remote transaction exists now; wait longer than a regular request
    # would before giving up on recording its outcome.
    with session_lock(session_id, retries=RESULT_LOCK_RETRIES):
        current = load_wizard(session_id)
        if current is None:
            log(event="submission_result_orphaned", sessionId=session_id, result=type(result).__name__)
            return None
        coordinator.apply_result(current, result, response, attempt=attempt)
        save_wizard(current)
        return current


def release_submission(
    session_id: str,
    coordinator: SubmissionCoordinator,
    error: Exception,
    attempt: Optional[int] = None,
) -> Optional[WizardSession]:
    """
    A submission could not be carried through (queue unavailable, result
    never recorded): record it as a failure so the gate accepts a retry.
    """
    log(event="submission_released", sessionId=session_id, attempt=attempt,
        errorType=type(error).__name__, error=str(error)[:500])
    with session_lock(session_id, retries=RESULT_LOCK_RETRIES):
        current = load_wizard(session_id)
        if current is None:
            return None
        reason = failure_message(error, current.kind)
        coordinator.apply_result(current, Failure(reason=reason), attempt=attempt)
        save_wizard(current)
        return current


def confirm_wizard(session_id: str, coordinator: SubmissionCoordinator, authorization: str = "") -> WizardSession:
    with session_lock(session_id):
        session = _load_or_raise(session_id)
        try:
            began = coordinator.begin(session)
        finally:
            save_wizard(session)

    if not began:
        return session

    attempt = session.submissionAttempts
    try:
        if settings.SUBMIT_MODE == "rq":
            # Imported here so sync deployments never need a queue connection.
            from betpay.queue.jobs import submit_transaction_job
            from betpay.queue.rq_conn import get_queue

            get_queue().enqueue(submit_transaction_job, session_id, authorization, attempt)
            log(event="submission_enqueued", sessionId=session_id, attempt=attempt)
            return session

        return run_submission(session_id, coordinator) or session
    except Exception as e:
        return release_submission(session_id, coordinator, e, attempt=attempt) or session


def is_submitting(session: WizardSession) -> bool:
    return session.submitting or session.state == sm.SUBMITTING
