"""
Wizard error taxonomy.

ValidationError and StepTransitionError are local and never reach the remote
layer. RemoteTransactionError is raised by the REST client and converted into
a Failure result by the submission coordinator. SideEffectError never leaves
the bridge.
"""
from typing import Any, Dict, Optional

GENERIC_MISSING_DATA = "Données manquantes pour la transaction"
GENERIC_DEPOSIT_FAILURE = "Erreur lors de la création du dépôt"
GENERIC_WITHDRAWAL_FAILURE = "Erreur lors de la création du retrait"


class WizardError(Exception):
    """Base class for all wizard errors."""
    pass


class ValidationError(WizardError):
    """A step's value fails its constraints; carries per-field messages."""

    def __init__(self, field_errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in field_errors.items()))
        self.field_errors = dict(field_errors)


class MissingDataError(WizardError):
    """Confirmation attempted with a required draft field still empty."""
    pass


class StepTransitionError(WizardError):
    """Operation not allowed in the wizard's current state."""
    pass


class WizardNotFound(WizardError):
    pass


class RemoteTransactionError(WizardError):
    """The remote create-transaction (or registry) call failed."""

    def __init__(self, message: str, status_code: int = 0, payload: Optional[Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class SideEffectError(WizardError):
    """Dialer, clipboard or link-open failure. Caught at the bridge boundary."""
    pass


def extract_time_error_message(error: Exception) -> Optional[str]:
    """
    Return the remote service's time-window message (e.g. a deposit attempted
    outside operating hours) when the error body carries one.
    """
    payload = getattr(error, "payload", None)
    if not isinstance(payload, dict):
        return None
    for container in (payload, payload.get("details")):
        if isinstance(container, dict):
            msg = container.get("error_time_message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
    return None


def failure_message(error: Exception, kind: str) -> str:
    generic = GENERIC_WITHDRAWAL_FAILURE if kind == "withdrawal" else GENERIC_DEPOSIT_FAILURE
    return extract_time_error_message(error) or generic
