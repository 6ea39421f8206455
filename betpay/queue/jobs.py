from typing import Optional

from betpay.client.api_client import RemoteApi
from betpay.core.orchestrator import release_submission, run_submission
from betpay.core.submission import SubmissionCoordinator
from betpay.observability.logging import log

def submit_transaction_job(session_id: str, authorization: str = "", attempt: Optional[int] = None):
    """
    Background job performing the remote create call for a wizard already
    marked as submitting. The client polls the wizard until it leaves SUBMITTING.
    """
    coordinator = SubmissionCoordinator(RemoteApi(authorization=authorization))
    try:
        log(event="submission_job_start", sessionId=session_id, attempt=attempt)
        run_submission(session_id, coordinator)
    except Exception as e:
        log(event="submission_job_exception", sessionId=session_id, error=str(e))
        release_submission(session_id, coordinator, e, attempt=attempt)
        raise
