from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from config import settings


class BillingApiError(RuntimeError):
    """Raised for transport failures and non-2xx answers from the billing API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def create_billing_client(
    access_token: Optional[str] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    headers = {"Accept": "application/json"}
    token = access_token or settings.billing_api_token
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.Client(
        base_url=settings.billing_api_url,
        headers=headers,
        timeout=settings.billing_api_timeout_seconds,
        transport=transport,
    )


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _error_message(method: str, path: str, response: httpx.Response, payload: Any) -> str:
    detail = None
    if isinstance(payload, dict):
        detail = payload.get("message") or payload.get("error") or payload.get("detail")
    detail = detail or response.reason_phrase
    return f"{method} {path} returned {response.status_code}: {detail}"


def request_json(
    client: httpx.Client,
    method: str,
    path: str,
    *,
    json: Optional[Dict[str, Any]] = None,
) -> Any:
    try:
        response = client.request(method, path, json=json)
    except httpx.HTTPError as exc:
        raise BillingApiError(f"{method} {path} failed: {exc}") from exc
    if response.is_error:
        payload = _error_payload(response)
        raise BillingApiError(
            _error_message(method, path, response, payload),
            status_code=response.status_code,
            payload=payload,
        )
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise BillingApiError(
            f"{method} {path} returned a non-JSON body",
            status_code=response.status_code,
        ) from exc
