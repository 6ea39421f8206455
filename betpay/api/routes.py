from dataclasses import asdict
from typing import Callable

from fastapi import APIRouter, Depends, Header, Response
from starlette.concurrency import run_in_threadpool

from betpay.api.auth import require_api_key
from betpay.api.schemas import (
    OptionsResponse,
    SelectRequest,
    StartWizardRequest,
    WizardResponse,
)
from betpay.client.api_client import RemoteApi
from betpay.core import wizard
from betpay.core.confirmation import cancel_gate
from betpay.core.orchestrator import (
    abandon_wizard,
    confirm_wizard,
    create_wizard,
    is_submitting,
    mutate_wizard,
    read_wizard,
)
from betpay.core.submission import SubmissionCoordinator
from betpay.store.models import WizardSession

router = APIRouter(prefix="/wizard", tags=["wizard"], dependencies=[Depends(require_api_key)])


def get_remote_api(authorization: str = Header(default="")) -> RemoteApi:
    return RemoteApi(authorization=authorization)


def _ref(obj):
    return asdict(obj) if obj is not None else None


def _wizard_view(s: WizardSession) -> WizardResponse:
    """Build the response and drain one-shot toasts and actions."""
    outbox = s.drain_outbox()
    d = s.draft
    network = _ref(d.network)
    if network:
        network["carrier"] = d.network.carrier.value
        network["depositChannel"] = d.network.depositChannel.value
    ussd = None
    if s.ussd:
        ussd = {**asdict(s.ussd), "title": f"Transaction {(d.network.publicName if d.network else '') or 'Mobile'}"}
    return WizardResponse(
        sessionId=s.sessionId,
        kind=s.kind,
        state=s.state,
        step=s.step,
        submitting=is_submitting(s),
        draft={
            "platform": _ref(d.platform),
            "accountId": _ref(d.accountId),
            "network": network,
            "phone": _ref(d.phone),
            "amount": str(d.amount),
            "withdrawalCode": d.withdrawalCode,
        },
        confirmation=s.confirmation,
        transactionLink=s.transactionLink,
        ussd=ussd,
        redirect=s.redirect,
        fieldErrors=s.fieldErrors,
        toasts=outbox["toasts"],
        actions=outbox["actions"],
    )


def _respond(session_id: str, op: Callable[[WizardSession], object]) -> WizardResponse:
    holder = {}

    def fn(s: WizardSession):
        op(s)
        holder["view"] = _wizard_view(s)

    mutate_wizard(session_id, fn)
    return holder["view"]


def _noop(_s: WizardSession) -> None:
    return None


@router.post("", response_model=WizardResponse, status_code=201)
async def start(body: StartWizardRequest, api: RemoteApi = Depends(get_remote_api)):
    session = await run_in_threadpool(create_wizard, body.kind, api)
    return _wizard_view(session)


@router.get("/{session_id}", response_model=WizardResponse)
def view(session_id: str):
    return _respond(session_id, _noop)


@router.get("/{session_id}/options", response_model=OptionsResponse)
def options(session_id: str):
    s = read_wizard(session_id)
    return OptionsResponse(sessionId=s.sessionId, step=s.step, options=wizard.options(s))


@router.post("/{session_id}/select", response_model=WizardResponse)
def select(session_id: str, body: SelectRequest):
    return _respond(session_id, lambda s: wizard.select(s, body.value, withdrawal_code=body.withdrawalCode))


@router.post("/{session_id}/forward", response_model=WizardResponse)
def forward(session_id: str):
    return _respond(session_id, wizard.forward)


@router.post("/{session_id}/backward", response_model=WizardResponse)
def backward(session_id: str):
    return _respond(session_id, wizard.backward)


@router.post("/{session_id}/confirm", response_model=WizardResponse)
async def confirm(session_id: str, api: RemoteApi = Depends(get_remote_api)):
    coordinator = SubmissionCoordinator(api)
    await run_in_threadpool(confirm_wizard, session_id, coordinator, api.authorization)
    return _respond(session_id, _noop)


@router.post("/{session_id}/cancel", response_model=WizardResponse)
def cancel(session_id: str):
    return _respond(session_id, cancel_gate)


@router.post("/{session_id}/link/continue", response_model=WizardResponse)
def link_continue(session_id: str, api: RemoteApi = Depends(get_remote_api)):
    return _respond(session_id, SubmissionCoordinator(api).continue_link)


@router.post("/{session_id}/link/cancel", response_model=WizardResponse)
def link_cancel(session_id: str, api: RemoteApi = Depends(get_remote_api)):
    return _respond(session_id, SubmissionCoordinator(api).cancel_link)


@router.post("/{session_id}/ussd/copy", response_model=WizardResponse)
def ussd_copy(session_id: str, api: RemoteApi = Depends(get_remote_api)):
    return _respond(session_id, SubmissionCoordinator(api).copy_ussd)


@router.post("/{session_id}/ussd/dismiss", response_model=WizardResponse)
def ussd_dismiss(session_id: str, api: RemoteApi = Depends(get_remote_api)):
    return _respond(session_id, SubmissionCoordinator(api).dismiss_ussd)


@router.delete("/{session_id}", status_code=204)
def abandon(session_id: str):
    abandon_wizard(session_id)
    return Response(status_code=204)
