from fastapi import Header, HTTPException
from betpay.settings import settings


def require_api_key(x_api_key: str = Header(default="", alias="x-api-key")):
    """
    Service-level key shared with the front end. User authentication stays
    with the remote service (the Authorization header is forwarded to it).
    - API_KEY empty: every request passes.
    - API_KEY set: x-api-key must match.
    """
    if not settings.API_KEY:
        return
    if x_api_key != settings.API_KEY:
        raise HTTPException(status_code=401, detail="Invalid API key")


def require_admin(x_admin_key: str = Header(default="", alias="x-admin-key")):
    if not settings.ADMIN_RBAC_ENABLED:
        return
    # Enabled without a configured key: reject everything.
    if not settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Admin access disabled (no key configured)")
    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid admin key")
