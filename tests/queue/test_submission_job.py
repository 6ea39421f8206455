import pytest
from unittest.mock import patch

from betpay.queue.jobs import submit_transaction_job


@patch("betpay.queue.jobs.log")
@patch("betpay.queue.jobs.run_submission")
@patch("betpay.queue.jobs.RemoteApi")
def test_submit_job_runs_submission(mock_api_cls, mock_run, mock_log):
    submit_transaction_job("wiz-1", "Bearer tok", 1)

    mock_api_cls.assert_called_once_with(authorization="Bearer tok")
    session_id, coordinator = mock_run.call_args.args
    assert session_id == "wiz-1"
    assert coordinator.api is mock_api_cls.return_value
    assert mock_log.call_args_list[0].kwargs["event"] == "submission_job_start"


@patch("betpay.queue.jobs.log")
@patch("betpay.queue.jobs.release_submission")
@patch("betpay.queue.jobs.run_submission")
@patch("betpay.queue.jobs.RemoteApi")
def test_submit_job_releases_gate_and_reraises(mock_api_cls, mock_run, mock_release, mock_log):
    err = RuntimeError("redis down")
    mock_run.side_effect = err
    with pytest.raises(RuntimeError):
        submit_transaction_job("wiz-1", "", 3)
    assert mock_log.call_args.kwargs["event"] == "submission_job_exception"
    session_id, _coordinator, raised = mock_release.call_args.args
    assert (session_id, raised) == ("wiz-1", err)
    assert mock_release.call_args.kwargs["attempt"] == 3
