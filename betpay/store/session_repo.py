import json
import time
import inspect
from dataclasses import asdict
from decimal import Decimal, InvalidOperation
from typing import Optional

from betpay.store.redis_conn import get_redis
from betpay.store.models import (
    AccountIdentifierRef,
    Carrier,
    Catalog,
    DepositChannel,
    MerchantConfig,
    NetworkRef,
    PhoneRef,
    PlatformRef,
    TransactionDraft,
    UssdDirective,
    WizardSession,
)
from betpay.settings import settings

PREFIX = "wizard:"


def _key(session_id: str) -> str:
    return f"{PREFIX}{session_id}"


def _json_safe(obj):
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, tuple):
        return [_json_safe(v) for v in obj]
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_json_safe(v) for v in obj]
    return obj


def _network_from_dict(d: Optional[dict]) -> Optional[NetworkRef]:
    if not d:
        return None
    d = dict(d)
    d["depositChannel"] = DepositChannel.parse(d.get("depositChannel"))
    d["carrier"] = Carrier.from_network_name(d.get("name"))
    return NetworkRef(**_filter_kwargs(NetworkRef, d))


def _filter_kwargs(cls, data: dict) -> dict:
    """
    Drop unknown fields so cls(**kwargs) never explodes on older payloads
    """
    allowed = set(inspect.signature(cls).parameters.keys())
    return {k: v for k, v in data.items() if k in allowed}


def _decimal(raw) -> Decimal:
    try:
        return Decimal(str(raw if raw is not None else "0"))
    except InvalidOperation:
        return Decimal("0")


def session_to_dict(session: WizardSession) -> dict:
    data = asdict(session)
    data["merchantConfig"] = {
        "perNetworkMerchantPhone": [
            [carrier, country, phone]
            for (carrier, country), phone in session.merchantConfig.perNetworkMerchantPhone.items()
        ]
    }
    return _json_safe(data)


def session_from_dict(data: dict) -> WizardSession:
    data = dict(data)

    cat = data.get("catalog") or {}
    data["catalog"] = Catalog(
        platforms=[PlatformRef(**_filter_kwargs(PlatformRef, p)) for p in cat.get("platforms") or []],
        accountIds=[AccountIdentifierRef(**_filter_kwargs(AccountIdentifierRef, a)) for a in cat.get("accountIds") or []],
        networks=[_network_from_dict(n) for n in cat.get("networks") or []],
        phones=[PhoneRef(**_filter_kwargs(PhoneRef, p)) for p in cat.get("phones") or []],
    )

    dr = data.get("draft") or {}
    data["draft"] = TransactionDraft(
        platform=PlatformRef(**_filter_kwargs(PlatformRef, dr["platform"])) if dr.get("platform") else None,
        accountId=AccountIdentifierRef(**_filter_kwargs(AccountIdentifierRef, dr["accountId"])) if dr.get("accountId") else None,
        network=_network_from_dict(dr.get("network")),
        phone=PhoneRef(**_filter_kwargs(PhoneRef, dr["phone"])) if dr.get("phone") else None,
        amount=_decimal(dr.get("amount")),
        withdrawalCode=dr.get("withdrawalCode"),
    )

    mc = data.get("merchantConfig") or {}
    data["merchantConfig"] = MerchantConfig(
        perNetworkMerchantPhone={
            (carrier, country): phone
            for carrier, country, phone in mc.get("perNetworkMerchantPhone") or []
        }
    )

    if data.get("ussd"):
        data["ussd"] = UssdDirective(**_filter_kwargs(UssdDirective, data["ussd"]))

    return WizardSession(**_filter_kwargs(WizardSession, data))


def load_wizard(session_id: str) -> Optional[WizardSession]:
    r = get_redis()
    raw = r.get(_key(session_id))
    if not raw:
        return None
    return session_from_dict(json.loads(raw))


def save_wizard(session: WizardSession) -> None:
    r = get_redis()
    session.lastUpdatedAtEpoch = int(time.time())
    if session.createdAtEpoch is None:
        session.createdAtEpoch = session.lastUpdatedAtEpoch
    r.set(_key(session.sessionId), json.dumps(session_to_dict(session)), ex=settings.WIZARD_TTL_SEC)


def discard_wizard(session_id: str) -> None:
    r = get_redis()
    r.delete(_key(session_id))
