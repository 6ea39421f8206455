"""
Five-step wizard: select a value for the current step, move forward when it
is valid, move backward freely. Values are never cleared by navigation.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from betpay.core import state_machine as sm
from betpay.core.channel import merchant_config_from_settings
from betpay.core.confirmation import open_gate
from betpay.core.errors import RemoteTransactionError, StepTransitionError, ValidationError
from betpay.core.registry import (
    account_ids_for_platform,
    find_account_id,
    find_network,
    find_phone,
    find_platform,
    load_catalog,
    networks_for_kind,
    phones_for_network,
)
from betpay.core.validation import step_errors
from betpay.observability.logging import log
from betpay.store.models import MerchantConfig, WizardSession

MSG_NOT_FOUND = "Sélection introuvable"
MSG_AMOUNT_INVALID = "Montant invalide"


def start_wizard(session_id: str, kind: str, api) -> WizardSession:
    """
    New session on STEP_1 with an empty draft. The catalog and, for deposits,
    the merchant settings are fetched here and only live on this session.
    """
    if kind not in sm.KINDS:
        raise ValidationError({"kind": f"unsupported kind: {kind}"})

    catalog = load_catalog(api)
    merchant_config = MerchantConfig()
    if kind == sm.KIND_DEPOSIT:
        try:
            merchant_config = merchant_config_from_settings(api.get_settings())
        except RemoteTransactionError as e:
            # Without merchant phones every deposit falls back to the dashboard redirect.
            log(event="wizard_settings_unavailable", sessionId=session_id, statusCode=e.status_code)

    session = WizardSession(
        sessionId=session_id,
        kind=kind,
        catalog=catalog,
        merchantConfig=merchant_config,
    )
    log(
        event="wizard_started",
        sessionId=session_id,
        kind=kind,
        platforms=len(catalog.platforms),
        networks=len(catalog.networks),
        phones=len(catalog.phones),
        merchantKeys=len(merchant_config.perNetworkMerchantPhone),
    )
    return session


def _require_step_state(session: WizardSession, op: str) -> None:
    if session.state not in sm.STEP_STATES:
        raise StepTransitionError(f"{op} not allowed in state {session.state}")


def _parse_amount(raw: Any) -> Decimal:
    try:
        amount = Decimal(str(raw).strip().replace(" ", "").replace(",", "."))
    except (InvalidOperation, AttributeError):
        raise ValidationError({"amount": MSG_AMOUNT_INVALID})
    if not amount.is_finite():
        raise ValidationError({"amount": MSG_AMOUNT_INVALID})
    return amount


def select(session: WizardSession, value: Any = None, withdrawal_code: Optional[str] = None) -> WizardSession:
    """Set the current step's draft field. Later-step values are kept."""
    _require_step_state(session, "select")
    step = session.step
    draft = session.draft

    if step == sm.STEP_PLATFORM:
        platform = find_platform(session.catalog, value)
        if platform is None:
            raise ValidationError({"platform": MSG_NOT_FOUND})
        draft.platform = platform
        field = "platform"

    elif step == sm.STEP_ACCOUNT:
        candidates = account_ids_for_platform(session.catalog, draft.platform)
        acc = find_account_id(session.catalog, value) if str(value or "").isdigit() else None
        if acc is None or acc not in candidates:
            raise ValidationError({"accountId": MSG_NOT_FOUND})
        draft.accountId = acc
        field = "accountId"

    elif step == sm.STEP_NETWORK:
        net = find_network(session.catalog, value) if str(value or "").isdigit() else None
        if net is None or net not in networks_for_kind(session.catalog, session.kind):
            raise ValidationError({"network": MSG_NOT_FOUND})
        draft.network = net
        field = "network"

    elif step == sm.STEP_PHONE:
        phone = find_phone(session.catalog, value) if str(value or "").isdigit() else None
        if phone is None or phone not in phones_for_network(session.catalog, draft.network):
            raise ValidationError({"phone": MSG_NOT_FOUND})
        draft.phone = phone
        field = "phone"

    else:
        if value is not None:
            draft.amount = _parse_amount(value)
        if session.kind == sm.KIND_WITHDRAWAL and withdrawal_code is not None:
            draft.withdrawalCode = withdrawal_code.strip()
        field = "amount"

    session.fieldErrors.pop(field, None)
    if field == "amount":
        session.fieldErrors.pop("withdrawalCode", None)
    return session


def forward(session: WizardSession) -> WizardSession:
    """
    Advance one step when the current step's value is valid; from the last
    step, open the confirmation gate instead.
    """
    _require_step_state(session, "forward")
    errors = step_errors(session, session.step)
    if errors:
        session.fieldErrors = errors
        raise ValidationError(errors)

    session.fieldErrors = {}
    if session.step < sm.LAST_STEP:
        session.step += 1
        session.state = sm.step_state(session.step)
        return session
    return open_gate(session)


def backward(session: WizardSession) -> WizardSession:
    _require_step_state(session, "backward")
    if session.step > sm.FIRST_STEP:
        session.step -= 1
        session.state = sm.step_state(session.step)
    session.fieldErrors = {}
    return session


def options(session: WizardSession) -> List[Dict[str, Any]]:
    """Candidate values for the current step."""
    step = session.step
    draft = session.draft
    if step == sm.STEP_PLATFORM:
        return [{"id": p.id, "name": p.name} for p in session.catalog.platforms]
    if step == sm.STEP_ACCOUNT:
        return [{"id": a.id, "userAppId": a.userAppId, "app": a.app}
                for a in account_ids_for_platform(session.catalog, draft.platform)]
    if step == sm.STEP_NETWORK:
        return [{"id": n.id, "name": n.name, "publicName": n.publicName, "countryCode": n.countryCode}
                for n in networks_for_kind(session.catalog, session.kind)]
    if step == sm.STEP_PHONE:
        return [{"id": p.id, "phone": p.phone, "network": p.network}
                for p in phones_for_network(session.catalog, draft.network)]
    return []
