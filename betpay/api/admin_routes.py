from fastapi import APIRouter, Depends, HTTPException
from betpay.api.auth import require_admin
from betpay.store.session_repo import load_wizard
import betpay.observability.metrics as metrics

router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/wizard/{session_id}")
def get_wizard_snapshot(session_id: str, _=Depends(require_admin)):
    """Compact wizard snapshot for support. Does not drain toasts or actions."""
    s = load_wizard(session_id)
    if s is None:
        raise HTTPException(status_code=404, detail="Unknown wizard session")
    d = s.draft
    return {
        "sessionId": s.sessionId,
        "kind": s.kind,
        "state": s.state,
        "step": s.step,
        "submitting": bool(s.submitting),
        "submissionAttempts": int(s.submissionAttempts or 0),
        "lastError": s.lastError,
        "completed": {
            "platform": bool(d.platform),
            "accountId": bool(d.accountId),
            "network": bool(d.network),
            "phone": bool(d.phone),
            "amount": d.amount > 0,
        },
        "network": d.network.name if d.network else None,
        "carrier": d.network.carrier.value if d.network else None,
        "hasTransactionLink": bool(s.transactionLink),
        "hasUssdDirective": bool(s.ussd),
        "pendingActions": len(s.actions),
        "pendingToasts": len(s.toasts),
        "createdAtEpoch": s.createdAtEpoch,
        "lastUpdatedAtEpoch": s.lastUpdatedAtEpoch,
    }

@router.get("/metrics")
def get_metrics(_=Depends(require_admin)):
    """Submission counters backed by Redis."""
    return metrics.get_metrics_snapshot()
