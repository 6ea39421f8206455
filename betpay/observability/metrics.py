"""
Submission counters and latency samples kept in Redis, plus the snapshot
served by /admin/metrics. Missing keys (first boot) read as zero.
"""
from __future__ import annotations
import time
from typing import List
from betpay.store.redis_conn import get_redis

K_SUB_ATT = "metrics:submission:attempts"        # INCR
K_SUB_OK = "metrics:submission:succeeded"        # INCR
K_SUB_FAIL = "metrics:submission:failed"         # INCR
K_SUB_LAT = "metrics:submission:latencies"       # LPUSH ms
K_SUB_FAIL_RECENT = "metrics:submission:failed_recent"  # LPUSH sessionId
K_CHANNEL = "metrics:channel:"                   # + hosted_link / ussd / none / withdrawal

CHANNELS = ("hosted_link", "ussd", "none", "withdrawal")

_MAX_SAMPLES = 500

def _percentile(data: List[float], p: float) -> float:
    """Nearest-rank percentile on sorted data."""
    if not data:
        return 0.0
    d = sorted(data)
    k = max(1, int(round(p * len(d))))
    return float(d[k - 1])

def increment_submission_attempt() -> None:
    r = get_redis()
    r.incr(K_SUB_ATT, 1)

def increment_submission_succeeded() -> None:
    r = get_redis()
    r.incr(K_SUB_OK, 1)

def record_failed_submission(session_id: str) -> None:
    r = get_redis()
    r.incr(K_SUB_FAIL, 1)
    if session_id:
        r.lpush(K_SUB_FAIL_RECENT, session_id)
        r.ltrim(K_SUB_FAIL_RECENT, 0, 49)  # keep last 50

def record_submission_latency(ms: int) -> None:
    try:
        ms = int(ms)
    except (TypeError, ValueError):
        return
    r = get_redis()
    r.lpush(K_SUB_LAT, ms)
    r.ltrim(K_SUB_LAT, 0, _MAX_SAMPLES - 1)

def increment_channel(channel: str) -> None:
    r = get_redis()
    r.incr(f"{K_CHANNEL}{channel}", 1)

def _read_latencies_s() -> List[float]:
    r = get_redis()
    out: List[float] = []
    for x in r.lrange(K_SUB_LAT, 0, _MAX_SAMPLES - 1) or []:
        try:
            out.append(float(x) / 1000.0)
        except (TypeError, ValueError):
            continue
    return out

def get_metrics_snapshot() -> dict:
    r = get_redis()
    attempts = int(r.get(K_SUB_ATT) or 0)
    ok = int(r.get(K_SUB_OK) or 0)
    failed = int(r.get(K_SUB_FAIL) or 0)
    lat = _read_latencies_s()
    recent_failed = [str(x) for x in (r.lrange(K_SUB_FAIL_RECENT, 0, 19) or [])]

    return {
        "submission_attempts": attempts,
        "submission_succeeded": ok,
        "submission_failed": failed,
        "submission_success_rate": round((ok / attempts) * 100.0, 3) if attempts else 0.0,
        "p50_submission_latency": round(_percentile(lat, 0.50), 3),
        "p95_submission_latency": round(_percentile(lat, 0.95), 3),
        "channels": {c: int(r.get(f"{K_CHANNEL}{c}") or 0) for c in CHANNELS},
        "recent_failed_submissions": recent_failed,
        "snapshot_at": int(time.time()),
    }
