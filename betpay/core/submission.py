"""
Submission coordinator.

confirm = begin + call_remote + apply_result. The three pieces are exposed
separately so the HTTP layer can persist the `submitting` flag before the
remote call and apply the result to a freshly loaded session afterwards
(a gate closed in the meantime means the result is discarded).
"""
import time
from typing import Any, Dict, Optional, Tuple, Union

import betpay.observability.metrics as metrics
from betpay.core import state_machine as sm
from betpay.core.bridge import ActionBridge, attempt_dial, copy_to_clipboard, open_link
from betpay.core.channel import resolve_channel, resolve_ussd
from betpay.core.confirmation import require_complete
from betpay.core.errors import (
    GENERIC_MISSING_DATA,
    MissingDataError,
    RemoteTransactionError,
    StepTransitionError,
    failure_message,
)
from betpay.observability.logging import log
from betpay.settings import settings
from betpay.store.models import (
    Direct,
    Failure,
    HostedLink,
    TransactionDraft,
    UssdDirective,
    WizardSession,
)

SubmissionResult = Union[HostedLink, Direct, Failure]

TOAST_DEPOSIT_OK = "Dépôt initié avec succès!"
TOAST_WITHDRAWAL_OK = "Retrait initié avec succès!"


def _metric(fn, *args) -> None:
    if not settings.ENABLE_METRICS:
        return
    try:
        fn(*args)
    except Exception:
        pass


def build_payload(session: WizardSession) -> Dict[str, Any]:
    d = session.draft
    payload = {
        "amount": float(d.amount) if d.amount != d.amount.to_integral_value() else int(d.amount),
        "phone_number": d.phone.phone,
        "app": d.platform.id,
        "user_app_id": d.accountId.userAppId,
        "network": d.network.id,
        "source": settings.TRANSACTION_SOURCE,
    }
    if session.kind == sm.KIND_WITHDRAWAL:
        # The remote API spells it this way.
        payload["withdriwal_code"] = d.withdrawalCode or ""
    return payload


class SubmissionCoordinator:
    def __init__(self, api, dialer=None, opener=None, clipboard=None):
        bridge = ActionBridge()
        self.api = api
        self.dialer = dialer or bridge
        self.opener = opener or bridge
        self.clipboard = clipboard or bridge

    # -- confirm ----------------------------------------------------------------

    def begin(self, session: WizardSession) -> bool:
        """
        Claim the submission. Returns False (no remote call must follow) when a
        submission is already in flight or the draft is incomplete.
        """
        if session.submitting:
            log(event="submission_ignored_inflight", sessionId=session.sessionId)
            return False
        if session.state != sm.CONFIRMING:
            raise StepTransitionError(f"confirm not allowed in state {session.state}")
        try:
            require_complete(session)
        except MissingDataError as e:
            log(event="submission_aborted_missing_data", sessionId=session.sessionId, error=str(e))
            session.toast("error", GENERIC_MISSING_DATA)
            return False

        session.submitting = True
        session.submissionAttempts += 1
        session.state = sm.SUBMITTING
        session.lastError = None
        return True

    def call_remote(self, session: WizardSession) -> Tuple[SubmissionResult, Optional[Dict[str, Any]]]:
        """Exactly one remote create call. Never raises for remote failures."""
        payload = build_payload(session)
        start = time.time()
        _metric(metrics.increment_submission_attempt)
        log(event="submission_start", sessionId=session.sessionId, kind=session.kind,
            attempt=session.submissionAttempts, network=payload["network"], amount=str(payload["amount"]))
        try:
            if session.kind == sm.KIND_WITHDRAWAL:
                response = self.api.create_withdrawal(payload)
            else:
                response = self.api.create_deposit(payload)
        except RemoteTransactionError as e:
            reason = failure_message(e, session.kind)
            _metric(metrics.record_failed_submission, session.sessionId)
            log(event="submission_failed", sessionId=session.sessionId, kind=session.kind,
                statusCode=e.status_code, elapsedMs=int((time.time() - start) * 1000))
            return Failure(reason=reason), None
        except Exception as e:
            # Anything else (misconfiguration, bad payload) still has to release the gate.
            _metric(metrics.record_failed_submission, session.sessionId)
            log(event="submission_exception", sessionId=session.sessionId, kind=session.kind,
                errorType=type(e).__name__, error=str(e)[:500])
            return Failure(reason=failure_message(e, session.kind)), None

        _metric(metrics.increment_submission_succeeded)
        _metric(metrics.record_submission_latency, int((time.time() - start) * 1000))
        link = (response or {}).get("transaction_link") if session.kind == sm.KIND_DEPOSIT else None
        if isinstance(link, str) and link.strip():
            return HostedLink(url=link.strip()), response
        return Direct(), response

    def apply_result(
        self,
        session: WizardSession,
        result: SubmissionResult,
        response: Optional[Dict[str, Any]] = None,
        attempt: Optional[int] = None,
    ) -> WizardSession:
        if attempt is not None and attempt != session.submissionAttempts:
            # A newer submission owns the session; leave its flag alone.
            log(event="submission_result_superseded", sessionId=session.sessionId,
                attempt=attempt, current=session.submissionAttempts, result=type(result).__name__)
            return session
        session.submitting = False
        if session.state != sm.SUBMITTING:
            log(event="submission_result_discarded", sessionId=session.sessionId,
                state=session.state, result=type(result).__name__)
            return session

        if isinstance(result, Failure):
            session.toast("error", result.reason)
            session.lastError = result.reason
            session.state = sm.CONFIRMING
            return session

        if session.kind == sm.KIND_WITHDRAWAL:
            session.toast("success", TOAST_WITHDRAWAL_OK)
            _metric(metrics.increment_channel, "withdrawal")
            return self._complete(session)

        session.toast("success", TOAST_DEPOSIT_OK)
        channel = resolve_channel(session.draft, response, session.merchantConfig, session.kind)
        if isinstance(channel, HostedLink):
            _metric(metrics.increment_channel, "hosted_link")
            session.transactionLink = channel.url
            session.confirmation = None
            session.state = sm.LINK_INTERSTITIAL
            return session
        if isinstance(channel, UssdDirective):
            _metric(metrics.increment_channel, "ussd")
            return self._show_ussd(session, channel)
        _metric(metrics.increment_channel, "none")
        return self._complete(session)

    def confirm(self, session: WizardSession) -> Optional[SubmissionResult]:
        if not self.begin(session):
            return None
        result, response = self.call_remote(session)
        self.apply_result(session, result, response)
        return result

    # -- hosted-link interstitial ----------------------------------------------------

    def continue_link(self, session: WizardSession) -> WizardSession:
        """
        Open the hosted link in a new browsing context, then run the USSD
        completion step through the carrier-aware resolver.
        """
        self._require(session, sm.LINK_INTERSTITIAL, "continue")
        link = session.transactionLink
        session.transactionLink = None
        if link:
            open_link(self.opener, session, link)
        directive = resolve_ussd(session.draft, session.merchantConfig)
        if directive is not None:
            return self._show_ussd(session, directive)
        return self._complete(session)

    def cancel_link(self, session: WizardSession) -> WizardSession:
        self._require(session, sm.LINK_INTERSTITIAL, "cancel")
        session.transactionLink = None
        return self._complete(session)

    # -- USSD modal ----------------------------------------------------------------

    def copy_ussd(self, session: WizardSession) -> bool:
        self._require(session, sm.USSD_MODAL, "copy")
        code = session.ussd.dialCode if session.ussd else ""
        return copy_to_clipboard(self.clipboard, session, code)

    def dismiss_ussd(self, session: WizardSession) -> WizardSession:
        self._require(session, sm.USSD_MODAL, "dismiss")
        return self._complete(session)

    # -- internals -------------------------------------------------------------------

    def _require(self, session: WizardSession, state: str, op: str) -> None:
        if session.state != state:
            raise StepTransitionError(f"{op} not allowed in state {session.state}")

    def _show_ussd(self, session: WizardSession, directive: UssdDirective) -> WizardSession:
        session.ussd = directive
        session.confirmation = None
        session.state = sm.USSD_MODAL
        log(event="ussd_directive_shown", sessionId=session.sessionId,
            carrier=session.draft.network.carrier.value if session.draft.network else "",
            merchantPhone=directive.merchantPhone, dialCode=directive.dialCode)
        attempt_dial(self.dialer, session, directive.dialCode)
        return session

    def _complete(self, session: WizardSession) -> WizardSession:
        session.state = sm.COMPLETED
        session.redirect = settings.DASHBOARD_PATH
        session.confirmation = None
        session.ussd = None
        session.transactionLink = None
        session.draft = TransactionDraft()
        log(event="wizard_completed", sessionId=session.sessionId, kind=session.kind)
        return session
