from decimal import Decimal
from typing import Dict

from betpay.core import state_machine as sm
from betpay.core.registry import account_ids_for_platform, networks_for_kind, phones_for_network
from betpay.store.models import WizardSession

MSG_PLATFORM_REQUIRED = "Plateforme requise"
MSG_ACCOUNT_REQUIRED = "Identifiant de pari requis"
MSG_ACCOUNT_PLATFORM = "Identifiant non lié à cette plateforme"
MSG_NETWORK_REQUIRED = "Réseau requis"
MSG_NETWORK_UNAVAILABLE = "Réseau indisponible pour cette opération"
MSG_PHONE_REQUIRED = "Numéro requis"
MSG_PHONE_NETWORK = "Numéro non associé à ce réseau"
MSG_AMOUNT_POSITIVE = "Le montant doit être supérieur à 0"
MSG_WITHDRAWAL_CODE_REQUIRED = "Code de retrait requis"


def _platform_errors(s: WizardSession) -> Dict[str, str]:
    if s.draft.platform is None:
        return {"platform": MSG_PLATFORM_REQUIRED}
    return {}


def _account_errors(s: WizardSession) -> Dict[str, str]:
    acc = s.draft.accountId
    if acc is None or not (acc.userAppId or "").strip():
        return {"accountId": MSG_ACCOUNT_REQUIRED}
    if acc not in account_ids_for_platform(s.catalog, s.draft.platform):
        return {"accountId": MSG_ACCOUNT_PLATFORM}
    return {}


def _network_errors(s: WizardSession) -> Dict[str, str]:
    net = s.draft.network
    if net is None:
        return {"network": MSG_NETWORK_REQUIRED}
    if net.id not in {n.id for n in networks_for_kind(s.catalog, s.kind)}:
        return {"network": MSG_NETWORK_UNAVAILABLE}
    return {}


def _phone_errors(s: WizardSession) -> Dict[str, str]:
    phone = s.draft.phone
    if phone is None:
        return {"phone": MSG_PHONE_REQUIRED}
    if phone not in phones_for_network(s.catalog, s.draft.network):
        return {"phone": MSG_PHONE_NETWORK}
    return {}


def _amount_errors(s: WizardSession) -> Dict[str, str]:
    errors = {}
    if s.draft.amount is None or Decimal(s.draft.amount) <= 0:
        errors["amount"] = MSG_AMOUNT_POSITIVE
    if s.kind == "withdrawal" and not (s.draft.withdrawalCode or "").strip():
        errors["withdrawalCode"] = MSG_WITHDRAWAL_CODE_REQUIRED
    return errors


_STEP_VALIDATORS = {
    sm.STEP_PLATFORM: _platform_errors,
    sm.STEP_ACCOUNT: _account_errors,
    sm.STEP_NETWORK: _network_errors,
    sm.STEP_PHONE: _phone_errors,
    sm.STEP_AMOUNT: _amount_errors,
}


def step_errors(session: WizardSession, step: int) -> Dict[str, str]:
    """Per-field messages for `step`; empty when the step's value is valid."""
    return _STEP_VALIDATORS[step](session)


def draft_errors(session: WizardSession) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for step in sm.STEPS:
        errors.update(step_errors(session, step))
    return errors
