from decimal import Decimal

import pytest

from betpay.core.channel import (
    format_amount,
    merchant_config_from_settings,
    moov_dial_amount,
    resolve_channel,
)
from betpay.store.models import HostedLink, MerchantConfig, UssdDirective


def test_hosted_link_wins_over_ussd(session, fill):
    # Orange without payment-link support would otherwise dial
    fill(session, network_id=2, phone_id=12)
    ch = resolve_channel(session.draft, {"transaction_link": "https://x"}, session.merchantConfig)
    assert ch == HostedLink(url="https://x")


@pytest.mark.parametrize("network_id", [1, 2, 3, 4, 6])
def test_hosted_link_wins_for_any_network(session, fill, network_id):
    fill(session, network_id=network_id)
    ch = resolve_channel(session.draft, {"transaction_link": "https://pay.example/t/1"}, MerchantConfig())
    assert isinstance(ch, HostedLink)


def test_blank_link_is_ignored(session, fill):
    fill(session, network_id=1)
    ch = resolve_channel(session.draft, {"transaction_link": "  "}, session.merchantConfig)
    assert isinstance(ch, UssdDirective)


def test_moov_amount_transform(session, fill):
    fill(session, network_id=1, amount="1000")
    ch = resolve_channel(session.draft, {}, session.merchantConfig)
    assert ch.dialCode == "*155*2*1*0101010101*990#"
    assert ch.merchantPhone == "0101010101"
    assert ch.displayAmount == "990"


def test_moov_amount_never_below_one(session, fill):
    fill(session, network_id=1, amount="1")
    ch = resolve_channel(session.draft, {}, session.merchantConfig)
    assert ch.dialCode == "*155*2*1*0101010101*1#"


def test_moov_end_to_end_amount(session, fill):
    fill(session, network_id=1, amount="5000")
    ch = resolve_channel(session.draft, {}, session.merchantConfig)
    assert ch == UssdDirective(
        merchantPhone="0101010101",
        dialCode="*155*2*1*0101010101*4950#",
        displayAmount="4950",
    )


def test_moov_burkina_override(session, fill):
    fill(session, network_id=5)
    ch = resolve_channel(session.draft, None, session.merchantConfig)
    assert ch.merchantPhone == "70000001"
    assert ch.dialCode.startswith("*155*2*1*70000001*")


def test_orange_without_payment_link_dials_full_amount(session, fill):
    fill(session, network_id=2, phone_id=12, amount="5000")
    ch = resolve_channel(session.draft, {}, session.merchantConfig)
    assert ch.dialCode == "*144*2*1*0707070707*5000#"
    assert ch.displayAmount == "5000"


def test_orange_with_payment_link_yields_none(session, fill):
    fill(session, network_id=3, phone_id=13)
    assert resolve_channel(session.draft, {}, session.merchantConfig) is None


def test_other_carrier_yields_none(session, fill):
    fill(session, network_id=4, phone_id=14)
    assert resolve_channel(session.draft, {}, session.merchantConfig) is None


def test_non_connect_channel_yields_none(session, fill):
    fill(session, network_id=6)
    assert resolve_channel(session.draft, {}, session.merchantConfig) is None


def test_missing_merchant_phone_yields_none(session, fill):
    fill(session, network_id=1)
    cfg = merchant_config_from_settings({"orange_marchand_phone": "0707070707"})
    assert resolve_channel(session.draft, {}, cfg) is None


def test_burkina_does_not_fall_back_to_default_merchant(session, fill):
    fill(session, network_id=5)
    cfg = merchant_config_from_settings({"moov_merchant_phone": "0101010101"})
    assert resolve_channel(session.draft, {}, cfg) is None


def test_withdrawal_never_resolves(session, fill):
    fill(session, network_id=1)
    assert resolve_channel(session.draft, {"transaction_link": "https://x"}, session.merchantConfig, kind="withdrawal") is None
    assert resolve_channel(session.draft, {}, session.merchantConfig, kind="withdrawal") is None


def test_empty_draft_never_raises():
    from betpay.store.models import TransactionDraft
    assert resolve_channel(TransactionDraft(), {}, MerchantConfig()) is None


def test_merchant_key_prefers_merchant_spelling():
    cfg = merchant_config_from_settings({"moov_merchant_phone": "A", "moov_marchand_phone": "B"})
    assert cfg.perNetworkMerchantPhone[("moov", "")] == "A"
    cfg = merchant_config_from_settings({"moov_merchant_phone": "", "moov_marchand_phone": "B"})
    assert cfg.perNetworkMerchantPhone[("moov", "")] == "B"


@pytest.mark.parametrize("amount,expected", [
    ("1000", 990),
    ("1", 1),
    ("0.5", 1),
    ("101", 99),
    ("5000.50", 4950),
])
def test_moov_dial_amount(amount, expected):
    assert moov_dial_amount(Decimal(amount)) == expected


def test_format_amount():
    assert format_amount(Decimal("5000")) == "5000"
    assert format_amount(Decimal("5000.00")) == "5000"
    assert format_amount(Decimal("12.50")) == "12.5"
