"""
Selection registry: the read-only catalog a wizard session chooses from.

Built once when the wizard starts, from the remote list endpoints. Network
names are mapped to a Carrier here so nothing downstream compares strings.
"""
from typing import Any, Dict, List, Optional

from betpay.core.errors import RemoteTransactionError
from betpay.observability.logging import log
from betpay.store.models import (
    AccountIdentifierRef,
    Carrier,
    Catalog,
    DepositChannel,
    NetworkRef,
    PhoneRef,
    PlatformRef,
)


def _as_bool(v: Any, default: bool = False) -> bool:
    if v is None:
        return default
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes")
    return bool(v)


def platform_from_api(d: Dict[str, Any]) -> PlatformRef:
    return PlatformRef(id=str(d.get("id") or ""), name=str(d.get("name") or ""))


def account_id_from_api(d: Dict[str, Any]) -> AccountIdentifierRef:
    return AccountIdentifierRef(
        id=int(d.get("id") or 0),
        userAppId=str(d.get("user_app_id") or "").strip(),
        app=str(d.get("app") or ""),
    )


def network_from_api(d: Dict[str, Any]) -> NetworkRef:
    name = str(d.get("name") or "")
    return NetworkRef(
        id=int(d.get("id") or 0),
        name=name,
        countryCode=str(d.get("country_code") or "").lower(),
        publicName=str(d.get("public_name") or name),
        depositChannel=DepositChannel.parse(d.get("deposit_api")),
        supportsPaymentLink=_as_bool(d.get("payment_by_link")),
        activeForDeposit=_as_bool(d.get("active_for_deposit"), default=True),
        activeForWithdrawal=_as_bool(d.get("active_for_withdrawal"), default=True),
        carrier=Carrier.from_network_name(name),
    )


def phone_from_api(d: Dict[str, Any]) -> PhoneRef:
    return PhoneRef(
        id=int(d.get("id") or 0),
        phone=str(d.get("phone") or "").replace(" ", ""),
        network=int(d.get("network") or 0),
    )


def load_catalog(api) -> Catalog:
    """Fetch every registry list. A failing user-app-id list leaves it empty."""
    platforms = [platform_from_api(p) for p in api.list_platforms()]
    networks = [network_from_api(n) for n in api.list_networks()]
    phones = [phone_from_api(p) for p in api.list_phones()]
    try:
        account_ids = [account_id_from_api(a) for a in api.list_user_app_ids()]
    except RemoteTransactionError as e:
        log(event="registry_user_app_ids_unavailable", statusCode=e.status_code)
        account_ids = []
    return Catalog(platforms=platforms, accountIds=account_ids, networks=networks, phones=phones)


# -- lookups ------------------------------------------------------------------

def find_platform(catalog: Catalog, platform_id: str) -> Optional[PlatformRef]:
    return next((p for p in catalog.platforms if p.id == str(platform_id)), None)


def find_account_id(catalog: Catalog, account_ref_id: int) -> Optional[AccountIdentifierRef]:
    return next((a for a in catalog.accountIds if a.id == int(account_ref_id)), None)


def find_network(catalog: Catalog, network_id: int) -> Optional[NetworkRef]:
    return next((n for n in catalog.networks if n.id == int(network_id)), None)


def find_phone(catalog: Catalog, phone_id: int) -> Optional[PhoneRef]:
    return next((p for p in catalog.phones if p.id == int(phone_id)), None)


# -- per-step candidates --------------------------------------------------------

def account_ids_for_platform(catalog: Catalog, platform: Optional[PlatformRef]) -> List[AccountIdentifierRef]:
    if platform is None:
        return []
    return [a for a in catalog.accountIds if a.app == platform.id]


def networks_for_kind(catalog: Catalog, kind: str) -> List[NetworkRef]:
    if kind == "withdrawal":
        return [n for n in catalog.networks if n.activeForWithdrawal]
    return [n for n in catalog.networks if n.activeForDeposit]


def phones_for_network(catalog: Catalog, network: Optional[NetworkRef]) -> List[PhoneRef]:
    if network is None:
        return []
    return [p for p in catalog.phones if p.network == network.id]
