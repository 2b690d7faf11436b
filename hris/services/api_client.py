"""
HRIS Console - Backend API Client

Thin httpx client for the HRIS REST backend (the system of record).

Behaviour:
- Base URL, timeout and fallback service token come from settings
- The caller's bearer token is forwarded untouched
- `{"data": ...}` envelopes are unwrapped
- Pagination arrives as `{data, meta}` or `{data, pagination}` and is
  normalised into a Page
- Any HTTP status >= 400 raises BackendAPIException carrying the server's
  own message; network failures raise BackendUnavailableException

There is no retry, backoff or circuit breaking here. Every failure is
logged and re-raised for the caller to surface.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from fastapi.encoders import jsonable_encoder

from hris.config import settings
from hris.utils.error_handling import (
    BackendAPIException,
    BackendUnavailableException,
    RateLimitException,
)

logger = logging.getLogger(__name__)


# Shown when the backend gives no message of its own
DEFAULT_STATUS_MESSAGES: Dict[int, str] = {
    401: "Session expired. Please login again.",
    403: "You do not have permission to perform this action.",
    404: "Resource not found.",
    500: "Server error. Please try again later.",
}
FALLBACK_ERROR_MESSAGE = "An error occurred"


@dataclass
class Page:
    """One page of a paginated backend listing."""
    data: List[Any] = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "pagination": {
                "page": self.page,
                "limit": self.limit,
                "total": self.total,
                "total_pages": self.total_pages,
            },
        }


def unwrap(payload: Any) -> Any:
    """Return `payload["data"]` when the backend wrapped its result, else the payload."""
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


def to_page(payload: Any) -> Page:
    """
    Normalise a listing response.

    Accepts `{data, meta}`, `{data, pagination}` or a bare list. Missing
    counters fall back to page 1, limit 10, total 0, 1 page.
    """
    if isinstance(payload, list):
        return Page(data=payload, limit=max(len(payload), 1), total=len(payload))

    payload = payload or {}
    data = payload.get("data") or []
    meta = payload.get("meta") or payload.get("pagination") or {}
    total_pages = meta.get("totalPages") or meta.get("total_pages") or 1
    return Page(
        data=data,
        page=int(meta.get("page") or 1),
        limit=int(meta.get("limit") or 10),
        total=int(meta.get("total") or 0),
        total_pages=int(total_pages),
    )


def extract_error_message(response: httpx.Response) -> str:
    """
    Pull the user-facing message out of an error response.

    The backend sends `{"error": {"message": ...}}`; some endpoints send a
    flat `{"message": ...}`. Without either, a per-status default is used.
    """
    body: Any = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])

    return DEFAULT_STATUS_MESSAGES.get(response.status_code, FALLBACK_ERROR_MESSAGE)


def _extract_error_list(response: httpx.Response) -> Optional[list]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("details"), list):
            return error["details"]
        if isinstance(body.get("errors"), list):
            return body["errors"]
    return None


class BackendClient:
    """
    Async client for the HRIS REST API.

    A fresh httpx.AsyncClient is opened per request. `transport` lets tests
    plug in a mock transport.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.backend_api_url).rstrip("/")
        self.token = token or settings.backend_api_token
        self.timeout = timeout if timeout is not None else settings.backend_timeout_seconds
        self.transport = transport

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        # Empty filters are dropped instead of being sent as blank query values
        if not params:
            return None
        return {k: v for k, v in params.items() if v is not None and v != ""}

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send one request to the backend.

        Raises:
            BackendAPIException: On HTTP status >= 400
            RateLimitException: On HTTP 429
            BackendUnavailableException: On timeout or connection failure
        """
        url = f"{self.base_url}{endpoint}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    json=jsonable_encoder(json) if json is not None else None,
                    params=self._clean_params(params),
                )
        except httpx.TimeoutException as e:
            logger.error(f"HRIS API timeout: {method} {endpoint}")
            raise BackendUnavailableException("Request timed out. Please try again.", original_error=e)
        except httpx.RequestError as e:
            logger.error(f"HRIS API request error: {method} {endpoint}: {e}")
            raise BackendUnavailableException(f"Network error: {str(e)}", original_error=e)

        logger.debug(f"HRIS API {method} {endpoint}: status={response.status_code}")

        if response.status_code >= 400:
            message = extract_error_message(response)
            logger.error(f"HRIS API error {response.status_code} on {method} {endpoint}: {message}")
            if response.status_code == 429:
                retry_after = response.headers.get("Retry-After")
                raise RateLimitException(
                    message=message,
                    retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                )
            raise BackendAPIException(
                message=message,
                backend_status=response.status_code,
                errors=_extract_error_list(response),
            )

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.request("GET", endpoint, params=params)
        return unwrap(self._json(response))

    async def get_page(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Page:
        response = await self.request("GET", endpoint, params=params)
        return to_page(self._json(response))

    async def get_raw(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Parsed body without envelope unwrapping."""
        response = await self.request("GET", endpoint, params=params)
        return self._json(response)

    async def post(self, endpoint: str, json: Optional[Any] = None) -> Any:
        response = await self.request("POST", endpoint, json=json if json is not None else {})
        return unwrap(self._json(response))

    async def put(self, endpoint: str, json: Optional[Any] = None) -> Any:
        response = await self.request("PUT", endpoint, json=json)
        return unwrap(self._json(response))

    async def patch(self, endpoint: str, json: Optional[Any] = None) -> Any:
        response = await self.request("PATCH", endpoint, json=json)
        return unwrap(self._json(response))

    async def delete(self, endpoint: str) -> Any:
        response = await self.request("DELETE", endpoint)
        return unwrap(self._json(response))
