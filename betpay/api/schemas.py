from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

Kind = Literal["deposit", "withdrawal"]

class StartWizardRequest(BaseModel):
    kind: Kind = "deposit"

class SelectRequest(BaseModel):
    # platform id (str), identifier/network/phone id (int) or amount
    value: Optional[Union[int, str, float]] = None
    withdrawalCode: Optional[str] = None

class Toast(BaseModel):
    level: Literal["success", "error", "info"] = "info"
    message: str

class UssdView(BaseModel):
    merchantPhone: str
    dialCode: str
    displayAmount: str
    title: str = ""

class DraftView(BaseModel):
    platform: Optional[Dict[str, Any]] = None
    accountId: Optional[Dict[str, Any]] = None
    network: Optional[Dict[str, Any]] = None
    phone: Optional[Dict[str, Any]] = None
    amount: str = "0"
    withdrawalCode: Optional[str] = None

class WizardResponse(BaseModel):
    sessionId: str
    kind: Kind
    state: str
    step: int
    totalSteps: int = 5
    submitting: bool = False
    draft: DraftView
    confirmation: Optional[Dict[str, Any]] = None
    transactionLink: Optional[str] = None
    ussd: Optional[UssdView] = None
    redirect: Optional[str] = None
    fieldErrors: Dict[str, str] = Field(default_factory=dict)
    toasts: List[Toast] = Field(default_factory=list)
    actions: List[Dict[str, Any]] = Field(default_factory=list)

class OptionsResponse(BaseModel):
    sessionId: str
    step: int
    options: List[Dict[str, Any]] = Field(default_factory=list)

class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    error: str
    message: str = ""
    fieldErrors: Dict[str, str] = Field(default_factory=dict)
