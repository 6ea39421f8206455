from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Dict, Any


class Carrier(str, Enum):
    MOOV = "moov"
    ORANGE = "orange"
    OTHER = "other"

    @classmethod
    def from_network_name(cls, name: Optional[str]) -> "Carrier":
        key = (name or "").strip().lower()
        for c in (cls.MOOV, cls.ORANGE):
            if key == c.value:
                return c
        return cls.OTHER


class DepositChannel(str, Enum):
    CONNECT = "connect"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "DepositChannel":
        return cls.CONNECT if (raw or "").strip().lower() == "connect" else cls.OTHER


@dataclass(frozen=True)
class PlatformRef:
    id: str
    name: str = ""


@dataclass(frozen=True)
class AccountIdentifierRef:
    id: int
    userAppId: str
    app: str = ""


@dataclass(frozen=True)
class NetworkRef:
    id: int
    name: str
    countryCode: str = ""
    publicName: str = ""
    depositChannel: DepositChannel = DepositChannel.OTHER
    supportsPaymentLink: bool = False
    activeForDeposit: bool = True
    activeForWithdrawal: bool = True
    # Resolved once from `name` when the network enters the registry.
    carrier: Carrier = Carrier.OTHER


@dataclass(frozen=True)
class PhoneRef:
    id: int
    phone: str
    network: int


@dataclass
class TransactionDraft:
    platform: Optional[PlatformRef] = None
    accountId: Optional[AccountIdentifierRef] = None
    network: Optional[NetworkRef] = None
    phone: Optional[PhoneRef] = None
    amount: Decimal = Decimal("0")
    withdrawalCode: Optional[str] = None


@dataclass
class MerchantConfig:
    # key: (carrier value, lower-cased country code or "" for the default entry)
    perNetworkMerchantPhone: Dict[tuple, str] = field(default_factory=dict)

    def merchant_phone(self, carrier: Carrier, country_code: str) -> Optional[str]:
        country = (country_code or "").strip().lower()
        if country == "bf":
            return self.perNetworkMerchantPhone.get((carrier.value, "bf")) or None
        return self.perNetworkMerchantPhone.get((carrier.value, "")) or None


@dataclass(frozen=True)
class UssdDirective:
    merchantPhone: str
    dialCode: str
    displayAmount: str


@dataclass(frozen=True)
class HostedLink:
    url: str


@dataclass(frozen=True)
class Direct:
    pass


@dataclass(frozen=True)
class Failure:
    reason: str


@dataclass
class Catalog:
    platforms: List[PlatformRef] = field(default_factory=list)
    accountIds: List[AccountIdentifierRef] = field(default_factory=list)
    networks: List[NetworkRef] = field(default_factory=list)
    phones: List[PhoneRef] = field(default_factory=list)


@dataclass
class WizardSession:
    sessionId: str = ""
    kind: str = "deposit"  # deposit/withdrawal

    # STEP_1..STEP_5/CONFIRMING/SUBMITTING/LINK_INTERSTITIAL/USSD_MODAL/COMPLETED
    state: str = "STEP_1"
    step: int = 1

    draft: TransactionDraft = field(default_factory=TransactionDraft)
    catalog: Catalog = field(default_factory=Catalog)
    merchantConfig: MerchantConfig = field(default_factory=MerchantConfig)

    # Re-entrancy guard for the remote create call
    submitting: bool = False
    submissionAttempts: int = 0

    # Confirmation gate snapshot (display fields)
    confirmation: Optional[Dict[str, Any]] = None

    # Post-submission
    transactionLink: Optional[str] = None
    ussd: Optional[UssdDirective] = None
    redirect: Optional[str] = None
    lastError: Optional[str] = None

    # Per-field validation messages for the current step
    fieldErrors: Dict[str, str] = field(default_factory=dict)

    # One-shot outputs drained by the client on read
    toasts: List[Dict[str, str]] = field(default_factory=list)
    actions: List[Dict[str, Any]] = field(default_factory=list)

    createdAtEpoch: Optional[int] = None
    lastUpdatedAtEpoch: Optional[int] = None

    def toast(self, level: str, message: str) -> None:
        self.toasts.append({"level": level, "message": message})

    def drain_outbox(self) -> Dict[str, List[Dict[str, Any]]]:
        out = {"toasts": list(self.toasts), "actions": list(self.actions)}
        self.toasts = []
        self.actions = []
        return out
