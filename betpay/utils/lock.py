import time
import uuid
from contextlib import contextmanager

from betpay.settings import settings
from betpay.store.redis_conn import get_redis

LOCK_PREFIX = "lock:wizard:"

# Compare-and-delete: never drop a lock that expired and was taken by another writer.
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class LockNotAcquired(RuntimeError):
    pass


@contextmanager
def session_lock(session_id: str, ttl_ms: int = 0, retries: int = 5, retry_delay: float = 0.1):
    """
    Single writer per wizard session. Retries briefly, then raises
    LockNotAcquired (mapped to a 409 "wizard_busy" response).
    """
    ttl_ms = int(ttl_ms or settings.SESSION_LOCK_TTL_MS)
    r = get_redis()
    key = f"{LOCK_PREFIX}{session_id}"
    token = uuid.uuid4().hex

    acquired = bool(r.set(key, token, px=ttl_ms, nx=True))
    attempt = 0
    while not acquired and attempt < retries:
        attempt += 1
        time.sleep(retry_delay)
        acquired = bool(r.set(key, token, px=ttl_ms, nx=True))
    if not acquired:
        raise LockNotAcquired(f"wizard {session_id} is locked by another operation")

    try:
        yield
    finally:
        try:
            r.eval(_RELEASE_SCRIPT, 1, key, token)
        except Exception:
            # The TTL frees the lock anyway.
            pass
