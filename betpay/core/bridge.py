"""
Dialer / clipboard / link-open bridge.

The service cannot touch the user's device, so the default adapters emit
one-shot client actions on the wizard session. The client performs each
action once (a hidden `tel:` anchor clicked then removed, a clipboard write,
a new tab) and the action is dropped from the session as soon as it is read.

Every side effect is best-effort: failures are logged and never reach the
transaction flow. Only clipboard failures are shown to the user (as a toast).
"""
from typing import Protocol

from betpay.core.errors import SideEffectError
from betpay.observability.logging import log
from betpay.store.models import WizardSession

TOAST_COPY_OK = "Code USSD copié"
TOAST_COPY_FAILED = "Copie impossible"


class DialerPort(Protocol):
    def attempt(self, session: WizardSession, code: str) -> None: ...


class LinkOpenerPort(Protocol):
    def open(self, session: WizardSession, url: str) -> None: ...


class ClipboardPort(Protocol):
    def copy(self, session: WizardSession, text: str) -> None: ...


class ActionBridge:
    """Default adapter for all three ports: queue client actions on the session."""

    def attempt(self, session: WizardSession, code: str) -> None:
        if not code:
            raise SideEffectError("empty dial code")
        session.actions.append({"type": "dial", "href": f"tel:{code}", "hidden": True, "once": True})

    def open(self, session: WizardSession, url: str) -> None:
        if not url:
            raise SideEffectError("empty link")
        session.actions.append({"type": "open", "href": url, "target": "_blank", "rel": "noopener noreferrer"})

    def copy(self, session: WizardSession, text: str) -> None:
        if not text:
            raise SideEffectError("nothing to copy")
        session.actions.append({"type": "copy", "text": text})


def attempt_dial(port: DialerPort, session: WizardSession, code: str) -> bool:
    try:
        port.attempt(session, code)
        return True
    except Exception as e:
        try:
            log(event="dialer_attempt_failed", sessionId=session.sessionId,
                errorType=type(e).__name__, error=str(e)[:200])
        except Exception:
            pass
        return False


def open_link(port: LinkOpenerPort, session: WizardSession, url: str) -> bool:
    try:
        port.open(session, url)
        return True
    except Exception as e:
        try:
            log(event="link_open_failed", sessionId=session.sessionId,
                errorType=type(e).__name__, error=str(e)[:200])
        except Exception:
            pass
        return False


def copy_to_clipboard(port: ClipboardPort, session: WizardSession, text: str) -> bool:
    try:
        port.copy(session, text)
    except Exception as e:
        try:
            log(event="clipboard_copy_failed", sessionId=session.sessionId,
                errorType=type(e).__name__)
        except Exception:
            pass
        session.toast("error", TOAST_COPY_FAILED)
        return False
    session.toast("success", TOAST_COPY_OK)
    return True
