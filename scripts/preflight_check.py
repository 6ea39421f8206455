#!/usr/bin/env python3
import sys
import os

print("Running preflight import check...")
try:
    # Dummy env so the settings load without a .env file
    os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
    os.environ.setdefault("REMOTE_BASE_URL", "http://localhost:8000/api")

    import betpay.main
    print("Import betpay.main: OK")

    import betpay.queue.jobs
    print("Import betpay.queue.jobs: OK")

    from betpay.settings import settings
    print(f"SUBMIT_MODE={settings.SUBMIT_MODE} REMOTE_BASE_URL={settings.REMOTE_BASE_URL or '(unset)'}")

    print("Preflight check passed.")
    sys.exit(0)
except Exception as e:
    print(f"Preflight check FAILED: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)
