import sys
import pytest
from unittest.mock import patch

@pytest.mark.parametrize("submit_mode", ["sync", "rq"])
@pytest.mark.parametrize("enable_metrics", ["true", "false"])
def test_import_graph_smoke(submit_mode, enable_metrics):
    """
    Verify that the app can be imported without crashing,
    regardless of submission mode and feature flags.
    """
    with patch.dict("os.environ", {
        "SUBMIT_MODE": submit_mode,
        "ENABLE_METRICS": enable_metrics,
        "REDIS_URL": "redis://localhost:6379/0",  # harmless default
    }):
        for mod in ("betpay.main", "betpay.queue.jobs"):
            sys.modules.pop(mod, None)

        try:
            import betpay.main
            import betpay.core.orchestrator
            import betpay.queue.jobs
        except ImportError as e:
            pytest.fail(f"Import failed with mode={submit_mode} metrics={enable_metrics}: {e}")

def test_uvicorn_importable():
    """
    Simulate uvicorn import string loading.
    """
    from betpay.main import app
    assert app is not None
