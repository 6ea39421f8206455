"""
Payment-channel resolution.

Given a completed deposit draft, the create-transaction response and the
merchant configuration snapshot, decide how the payment is completed:

- HostedLink: the remote service returned a transaction link; it wins.
- UssdDirective: a Connect network on a dialer-capable carrier; the user dials
  a synthesized merchant-payment code.
- None: nothing to do beyond the dashboard redirect.

Pure: no I/O, never raises. Missing data yields None.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Dict, Optional, Union

from betpay.settings import settings
from betpay.store.models import (
    Carrier,
    DepositChannel,
    HostedLink,
    MerchantConfig,
    TransactionDraft,
    UssdDirective,
)

Channel = Union[HostedLink, UssdDirective, None]

MOOV_DIAL_TEMPLATE = "*155*2*1*{merchant}*{amount}#"
ORANGE_DIAL_TEMPLATE = "*144*2*1*{merchant}*{amount}#"

# settings key -> (carrier, country); "" is the default (non Burkina Faso) entry.
# Earlier payloads spell "merchant" as "marchand"; the first non-empty key wins.
MERCHANT_SETTING_KEYS = (
    ("moov_merchant_phone", Carrier.MOOV, ""),
    ("moov_marchand_phone", Carrier.MOOV, ""),
    ("bf_moov_marchand_phone", Carrier.MOOV, "bf"),
    ("orange_marchand_phone", Carrier.ORANGE, ""),
    ("bf_orange_marchand_phone", Carrier.ORANGE, "bf"),
)


def merchant_config_from_settings(raw: Optional[Dict[str, Any]]) -> MerchantConfig:
    phones: Dict[tuple, str] = {}
    for key, carrier, country in MERCHANT_SETTING_KEYS:
        value = str((raw or {}).get(key) or "").strip()
        if value and (carrier.value, country) not in phones:
            phones[(carrier.value, country)] = value
    return MerchantConfig(perNetworkMerchantPhone=phones)


def _fee_factor() -> Decimal:
    try:
        return Decimal(str(settings.USSD_FEE_FACTOR))
    except InvalidOperation:
        return Decimal("0.99")


def moov_dial_amount(amount: Decimal) -> int:
    """Gross amount to request so the net credit after the carrier fee matches."""
    gross = (Decimal(amount) * _fee_factor()).to_integral_value(rounding=ROUND_FLOOR)
    return max(1, int(gross))


def format_amount(amount: Decimal) -> str:
    amount = Decimal(amount)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


def _hosted_link(response: Optional[Dict[str, Any]]) -> Optional[str]:
    if not isinstance(response, dict):
        return None
    link = response.get("transaction_link")
    if isinstance(link, str) and link.strip():
        return link.strip()
    return None


def resolve_ussd(draft: TransactionDraft, merchant_config: MerchantConfig) -> Optional[UssdDirective]:
    network = draft.network
    if network is None or network.depositChannel != DepositChannel.CONNECT:
        return None

    if network.carrier == Carrier.MOOV:
        merchant = merchant_config.merchant_phone(Carrier.MOOV, network.countryCode)
        if not merchant:
            return None
        dial_amount = str(moov_dial_amount(draft.amount))
        code = MOOV_DIAL_TEMPLATE.format(merchant=merchant, amount=dial_amount)
        return UssdDirective(merchantPhone=merchant, dialCode=code, displayAmount=dial_amount)

    if network.carrier == Carrier.ORANGE:
        # Payment-link capable Orange networks complete through the hosted link.
        if network.supportsPaymentLink:
            return None
        merchant = merchant_config.merchant_phone(Carrier.ORANGE, network.countryCode)
        if not merchant:
            return None
        dial_amount = format_amount(draft.amount)
        code = ORANGE_DIAL_TEMPLATE.format(merchant=merchant, amount=dial_amount)
        return UssdDirective(merchantPhone=merchant, dialCode=code, displayAmount=dial_amount)

    return None


def resolve_channel(
    draft: TransactionDraft,
    response: Optional[Dict[str, Any]],
    merchant_config: MerchantConfig,
    kind: str = "deposit",
) -> Channel:
    if kind != "deposit":
        return None
    try:
        link = _hosted_link(response)
        if link:
            return HostedLink(url=link)
        return resolve_ussd(draft, merchant_config)
    except (ArithmeticError, TypeError, ValueError):
        return None
