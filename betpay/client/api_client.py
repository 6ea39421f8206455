"""
REST client for the remote transaction service.

The remote service owns transactions, merchant settings and the user's
registries (platforms, networks, phones, betting identifiers). The caller's
Authorization header is forwarded as-is.
"""
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from betpay.core.errors import RemoteTransactionError
from betpay.observability.logging import log
from betpay.settings import settings

DEPOSIT_PATH = "/transactions/deposit"
WITHDRAWAL_PATH = "/transactions/withdrawal"
SETTINGS_PATH = "/settings"
PLATFORMS_PATH = "/platforms"
NETWORKS_PATH = "/networks"
PHONES_PATH = "/phones"
USER_APP_IDS_PATH = "/user-app-ids"

_client = httpx.Client(timeout=settings.REMOTE_TIMEOUT_SEC)


def _error_payload(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return {"detail": (resp.text or "")[:500]}


def _unwrap_list(data: Any) -> List[Dict[str, Any]]:
    # Paginated endpoints wrap items in {"results": [...]}
    if isinstance(data, dict):
        data = data.get("results") or []
    return [x for x in (data or []) if isinstance(x, dict)]


class RemoteApi:
    def __init__(self, authorization: str = "", base_url: Optional[str] = None):
        self.authorization = authorization
        self.base_url = (base_url if base_url is not None else settings.REMOTE_BASE_URL).rstrip("/")

    def _headers(self) -> dict:
        h = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.authorization:
            h["Authorization"] = self.authorization
        return h

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        if not self.base_url:
            raise RuntimeError("REMOTE_BASE_URL is not set")

        url = f"{self.base_url}{path}"
        start = time.time()
        try:
            resp = _client.request(method, url, headers=self._headers(), json=json)
        except httpx.TimeoutException as e:
            log(event="remote_timeout", method=method, path=path,
                elapsedMs=int((time.time() - start) * 1000))
            raise RemoteTransactionError(f"Remote call timed out: {e}", status_code=504,
                                         payload={"detail": "timeout"}) from e
        except httpx.HTTPError as e:
            log(event="remote_transport_error", method=method, path=path,
                errorType=type(e).__name__, error=str(e)[:500])
            raise RemoteTransactionError(f"Remote call failed: {e}") from e

        elapsed_ms = int((time.time() - start) * 1000)
        if not (200 <= resp.status_code < 300):
            payload = _error_payload(resp)
            log(event="remote_call_failed", method=method, path=path,
                statusCode=int(resp.status_code), elapsedMs=elapsed_ms)
            raise RemoteTransactionError(
                f"Remote call failed: {resp.status_code}",
                status_code=int(resp.status_code),
                payload=payload,
            )

        log(event="remote_call_ok", method=method, path=path,
            statusCode=int(resp.status_code), elapsedMs=elapsed_ms)
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            # The call succeeded; an unreadable body must not turn it into a failure.
            log(event="remote_body_unparseable", method=method, path=path,
                statusCode=int(resp.status_code))
            return {}

    # -- transactions ---------------------------------------------------------

    def create_deposit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request("POST", DEPOSIT_PATH, json=payload)
        return data if isinstance(data, dict) else {}

    def create_withdrawal(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request("POST", WITHDRAWAL_PATH, json=payload)
        return data if isinstance(data, dict) else {}

    # -- settings & registries ------------------------------------------------

    def get_settings(self) -> Dict[str, Any]:
        data = self._request("GET", SETTINGS_PATH)
        return data if isinstance(data, dict) else {}

    def list_platforms(self) -> List[Dict[str, Any]]:
        return _unwrap_list(self._request("GET", PLATFORMS_PATH))

    def list_networks(self) -> List[Dict[str, Any]]:
        return _unwrap_list(self._request("GET", NETWORKS_PATH))

    def list_phones(self) -> List[Dict[str, Any]]:
        return _unwrap_list(self._request("GET", PHONES_PATH))

    def list_user_app_ids(self) -> List[Dict[str, Any]]:
        return _unwrap_list(self._request("GET", USER_APP_IDS_PATH))
