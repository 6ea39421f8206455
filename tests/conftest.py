from decimal import Decimal
from unittest.mock import patch

import pytest

from betpay.core.channel import merchant_config_from_settings
from betpay.core.registry import (
    account_id_from_api,
    find_account_id,
    find_network,
    find_phone,
    find_platform,
    network_from_api,
    phone_from_api,
    platform_from_api,
)
from betpay.settings import settings
from betpay.store.models import Catalog, WizardSession

SETTINGS_PAYLOAD = {
    "moov_merchant_phone": "0101010101",
    "bf_moov_marchand_phone": "70000001",
    "orange_marchand_phone": "0707070707",
    "bf_orange_marchand_phone": "76000001",
}

NETWORKS = [
    {"id": 1, "name": "moov", "public_name": "Moov Money", "country_code": "ci",
     "deposit_api": "connect", "payment_by_link": False},
    {"id": 2, "name": "orange", "public_name": "Orange Money", "country_code": "ci",
     "deposit_api": "connect", "payment_by_link": False},
    {"id": 3, "name": "orange", "public_name": "Orange Money BF", "country_code": "bf",
     "deposit_api": "connect", "payment_by_link": True},
    {"id": 4, "name": "mtn", "public_name": "MTN MoMo", "country_code": "ci",
     "deposit_api": "connect", "payment_by_link": False},
    {"id": 5, "name": "Moov", "public_name": "Moov BF", "country_code": "BF",
     "deposit_api": "Connect", "payment_by_link": False},
    {"id": 6, "name": "wave", "public_name": "Wave", "country_code": "ci",
     "deposit_api": "other", "payment_by_link": False, "active_for_withdrawal": False},
]

PHONES = [
    {"id": 11, "phone": "+2250700000000", "network": 1},
    {"id": 12, "phone": "+2250707070707", "network": 2},
    {"id": 13, "phone": "+22670000000", "network": 3},
    {"id": 14, "phone": "+2250505050505", "network": 4},
]

PLATFORMS = [{"id": "P1", "name": "1xBet"}, {"id": "P2", "name": "Melbet"}]

USER_APP_IDS = [
    {"id": 21, "user_app_id": "12345", "app": "P1"},
    {"id": 22, "user_app_id": "99999", "app": "P2"},
]


@pytest.fixture(autouse=True)
def no_metrics():
    with patch.object(settings, "ENABLE_METRICS", False):
        yield


@pytest.fixture
def catalog():
    return Catalog(
        platforms=[platform_from_api(p) for p in PLATFORMS],
        accountIds=[account_id_from_api(a) for a in USER_APP_IDS],
        networks=[network_from_api(n) for n in NETWORKS],
        phones=[phone_from_api(p) for p in PHONES],
    )


@pytest.fixture
def merchant_config():
    return merchant_config_from_settings(SETTINGS_PAYLOAD)


@pytest.fixture
def session(catalog, merchant_config):
    return WizardSession(sessionId="wiz-1", kind="deposit", catalog=catalog, merchantConfig=merchant_config)


def fill_draft(s, network_id=1, phone_id=11, amount="5000", platform_id="P1", account_ref=21):
    """Complete all five steps directly on the draft."""
    s.draft.platform = find_platform(s.catalog, platform_id)
    s.draft.accountId = find_account_id(s.catalog, account_ref)
    s.draft.network = find_network(s.catalog, network_id)
    s.draft.phone = find_phone(s.catalog, phone_id)
    s.draft.amount = Decimal(amount)
    s.step = 5
    s.state = "STEP_5"
    return s


@pytest.fixture
def fill():
    return fill_draft
