import json
from decimal import Decimal
from unittest.mock import MagicMock, patch

from betpay.core.confirmation import open_gate
from betpay.store.models import Carrier, DepositChannel, UssdDirective
from betpay.store.session_repo import (
    discard_wizard,
    load_wizard,
    save_wizard,
    session_from_dict,
    session_to_dict,
)


def test_serialized_session_is_plain_json(session, fill):
    fill(session, amount="1500.50")
    data = session_to_dict(session)
    raw = json.dumps(data)
    assert '"amount": "1500.50"' in raw
    assert ["moov", "", "0101010101"] in data["merchantConfig"]["perNetworkMerchantPhone"]


def test_session_survives_storage(session, fill):
    fill(session)
    open_gate(session)
    session.ussd = UssdDirective(merchantPhone="0101", dialCode="*155*2*1*0101*4950#", displayAmount="4950")
    session.toast("info", "hello")

    restored = session_from_dict(json.loads(json.dumps(session_to_dict(session))))

    assert restored.draft == session.draft
    assert restored.draft.network.carrier is Carrier.MOOV
    assert restored.draft.network.depositChannel is DepositChannel.CONNECT
    assert restored.draft.amount == Decimal("5000")
    assert restored.catalog == session.catalog
    assert restored.merchantConfig == session.merchantConfig
    assert restored.ussd == session.ussd
    assert restored.state == "CONFIRMING"
    assert restored.toasts == [{"level": "info", "message": "hello"}]


def test_unknown_fields_are_dropped(session):
    data = session_to_dict(session)
    data["legacy_junk"] = 1
    data["catalog"]["platforms"][0]["logo"] = "x.png"
    restored = session_from_dict(data)
    assert restored.catalog.platforms[0].name == "1xBet"
    assert not hasattr(restored, "legacy_junk")


@patch("betpay.store.session_repo.get_redis")
def test_load_missing_returns_none(mock_get_redis):
    mock_redis = MagicMock()
    mock_redis.get.return_value = None
    mock_get_redis.return_value = mock_redis
    assert load_wizard("nope") is None
    mock_redis.get.assert_called_with("wizard:nope")


@patch("betpay.store.session_repo.get_redis")
def test_save_sets_ttl_and_timestamps(mock_get_redis, session):
    mock_redis = MagicMock()
    mock_get_redis.return_value = mock_redis

    save_wizard(session)

    key, payload = mock_redis.set.call_args.args
    assert key == "wizard:wiz-1"
    assert mock_redis.set.call_args.kwargs["ex"] > 0
    assert json.loads(payload)["sessionId"] == "wiz-1"
    assert session.createdAtEpoch is not None
    assert session.lastUpdatedAtEpoch >= session.createdAtEpoch


@patch("betpay.store.session_repo.get_redis")
def test_discard(mock_get_redis):
    mock_redis = MagicMock()
    mock_get_redis.return_value = mock_redis
    discard_wizard("wiz-1")
    mock_redis.delete.assert_called_once_with("wizard:wiz-1")
