"""
Remote Data Gateway.

Thin wrapper over httpx.AsyncClient. JSON requests get a JSON content type
and, when a session token exists, a bearer header. Failures come back as
NetworkError or HttpError carrying the status so callers can branch on it
(401 purges the session). Nothing is retried.
"""

from typing import Any, Callable, Dict, Optional

import httpx

from dashboard.errors import HttpError, NetworkError
from dashboard.logging_config import logger


GENERIC_ERROR_MESSAGE = "An error occurred"


def _error_message(response: httpx.Response) -> tuple:
    """Pull a message out of an error body, falling back to a generic one"""
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE, None

    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value, body
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"], body
    return GENERIC_ERROR_MESSAGE, body


class RemoteGateway:
    """Outbound HTTP for the dashboard"""

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], Optional[str]] = lambda: None,
        api_prefix: str = "/api",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RemoteGateway":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    def _headers(self, overrides: Optional[Dict[str, str]]) -> Dict[str, str]:
        # Caller-supplied headers replace the JSON default entirely (multipart
        # bodies need the transport to set their own boundary)
        headers = {"Content-Type": "application/json"} if overrides is None else dict(overrides)
        token = self._token_provider()
        if token and "Authorization" not in headers:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def api_url(self, endpoint: str) -> str:
        if endpoint.startswith(self.api_prefix + "/") or endpoint == self.api_prefix:
            return endpoint
        return f"{self.api_prefix}/{endpoint.lstrip('/')}"

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Call an API endpoint and return its decoded JSON body"""
        if files is not None and headers is None:
            headers = {}
        url = self.api_url(endpoint)
        response = await self._send(method, url, headers=self._headers(headers),
                                    json=json, data=data, files=files, params=params)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def fetch_fragment(self, path: str) -> str:
        """GET raw markup such as /dashboard.html; any non-2xx is an HttpError"""
        url = "/" + path.lstrip("/")
        response = await self._send("GET", url, headers=self._headers({"Accept": "text/html"}))
        return response.text

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.warning(f"{method} {url} failed before a response: {type(e).__name__}: {e}",
                           extra={"event_type": "network_error", "http_path": url})
            raise NetworkError(url=url) from e

        if not response.is_success:
            message, body = _error_message(response)
            logger.warning(f"{method} {url} -> {response.status_code}: {message}",
                           extra={"event_type": "http_error", "http_path": url,
                                  "http_status": response.status_code})
            raise HttpError(response.status_code, message, body=body, url=url)

        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    # ------------------------------------------------------------------
    # Endpoint helpers
    # ------------------------------------------------------------------

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        return await self.request("/login", method="POST", json={"username": username, "password": password})

    async def get_complaints(self, **filters) -> list:
        params = {k: v for k, v in filters.items() if v}
        return await self.request("/complaints", params=params or None)

    async def get_complaint_stats(self) -> Dict[str, Any]:
        return await self.request("/complaints/stats")

    async def update_complaint_status(self, complaint_id: str, status: str) -> Dict[str, Any]:
        return await self.request(f"/complaints/{complaint_id}/status", method="PUT", json={"status": status})

    async def delete_complaint(self, complaint_id: str) -> Dict[str, Any]:
        return await self.request(f"/complaints/{complaint_id}", method="DELETE")

    async def get_users(self) -> list:
        return await self.request("/users")
