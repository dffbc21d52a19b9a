"""NocoDB API authentication and transport.

Supports two credential headers, either or both may be set:
- xc-token: API token (stateless, preferred)
- xc-auth: session token issued by the NocoDB UI login

Every HTTP call goes through NocoDBTransport.request(), which converts any
failure into a NocoDBError. No retries; failures surface immediately.
"""

import logging
from typing import Any

import httpx

from nocodb_mcp.config import ConnectionConfig
from nocodb_mcp.errors import NocoDBError

logger = logging.getLogger(__name__)


def credential_headers(config: ConnectionConfig) -> dict[str, str]:
    """Build the NocoDB auth headers for a connection.

    Raises:
        NocoDBError: When neither an API token nor a session token is set.
    """
    if not config.has_credentials:
        raise NocoDBError("NOCODB_API_TOKEN or NOCODB_AUTH_TOKEN must be set")
    headers: dict[str, str] = {}
    if config.api_token:
        headers["xc-token"] = config.api_token
    if config.auth_token:
        headers["xc-auth"] = config.auth_token
    return headers


def _error_message(payload: Any, status: int) -> str:
    """Pick the human message out of a NocoDB error payload."""
    if isinstance(payload, dict):
        for key in ("msg", "message"):
            if payload.get(key):
                return str(payload[key])
    return f"Request failed with status code {status}"


def _decode(response: httpx.Response) -> Any:
    """Decode a response body: JSON when possible, text otherwise, None if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class NocoDBTransport:
    """Async HTTP client for the NocoDB REST API.

    The httpx client is created lazily on first use so the transport can be
    built outside a running event loop.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._headers = credential_headers(config)
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                verify=self.config.verify_ssl,
                timeout=self.config.timeout,
                headers={"Accept": "application/json", **self._headers},
            )
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        files: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> Any:
        """Issue one request and return the decoded body.

        Args:
            method: HTTP method.
            path: Absolute API path, e.g. "/api/v2/tables/m123/records".
            params: Query string parameters (already translated).
            json_body: JSON payload. DELETE requests may carry one too.
            files: Multipart file parts.
            data: Multipart form fields sent alongside ``files``.

        Returns:
            Decoded JSON, response text, or None for an empty body.

        Raises:
            NocoDBError: On any HTTP or connection failure.
        """
        client = self._get_client()
        logger.debug("%s %s params=%s", method, path, params)
        kwargs: dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body
        if files is not None:
            kwargs["files"] = files
        if data is not None:
            kwargs["data"] = data
        try:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return _decode(response)

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            payload = _decode(e.response)
            message = _error_message(payload, status)
            logger.error("NocoDB error %d on %s %s: %s", status, method, path, message)
            raise NocoDBError(message, status_code=status, details=payload) from e

        except httpx.RequestError as e:
            logger.error("Cannot reach NocoDB at %s: %s", self.config.base_url, e)
            raise NocoDBError(str(e) or type(e).__name__) from e

    async def get(self, path: str, params: dict[str, str] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: Any = None) -> Any:
        return await self.request("POST", path, json_body=json_body)

    async def patch(self, path: str, json_body: Any = None) -> Any:
        return await self.request("PATCH", path, json_body=json_body)

    async def delete(self, path: str, json_body: Any = None) -> Any:
        return await self.request("DELETE", path, json_body=json_body)

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("NocoDB client connection closed")
