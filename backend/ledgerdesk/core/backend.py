"""HTTP client for the bookkeeping backend.

Every call the service makes to the external backend goes through
``BackendClient``. It owns one ``httpx.AsyncClient`` for the lifetime of the
application, forwards the configured credentials and translates transport
and HTTP failures into ``BackendError`` carrying the backend's own message
when it sent one.
"""

from typing import Any

import httpx
import structlog

from ledgerdesk.config import Settings
from ledgerdesk.core.exceptions import BackendError

logger = structlog.get_logger()

GENERIC_ERROR = "An error occurred"


def error_message(response: httpx.Response, fallback: str = GENERIC_ERROR) -> str:
    """Extract the human readable error from a backend response body."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return fallback


async def _log_request(request: httpx.Request) -> None:
    logger.debug("backend_request", method=request.method, url=str(request.url))


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    if response.is_error:
        logger.warning(
            "backend_error_response",
            method=request.method,
            url=str(request.url),
            status=response.status_code,
        )
    else:
        logger.debug(
            "backend_response",
            method=request.method,
            url=str(request.url),
            status=response.status_code,
        )


class BackendClient:
    """Thin async wrapper around the bookkeeping REST API."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        cookie: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if cookie:
            headers["Cookie"] = cookie
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=5.0),
            transport=transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "BackendClient":
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            cookie=settings.api_cookie,
            timeout=settings.backend_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def url_for(self, path: str) -> str:
        """Absolute backend URL for a path, for links the user opens directly."""
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
        files: dict | None = None,
        data: dict | None = None,
        fallback: str = GENERIC_ERROR,
    ) -> httpx.Response:
        """Send a request and return the response, raising on any failure.

        Args:
            method: HTTP verb.
            path: Path relative to the backend base URL.
            json: JSON body.
            params: Query string parameters; ``None`` values are dropped.
            files: Multipart files, as accepted by httpx.
            data: Multipart form fields sent alongside ``files``.
            fallback: Message used when the backend gives none.

        Raises:
            BackendError: transport failure or non-2xx status. For HTTP
                errors ``upstream_status`` holds the backend status code.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(
                method, path, json=json, params=params or None, files=files, data=data
            )
        except httpx.TimeoutException as e:
            logger.warning("backend_timeout", method=method, path=path)
            raise BackendError(f"{fallback} (request timed out)") from e
        except httpx.HTTPError as e:
            logger.warning("backend_unreachable", method=method, path=path, error=str(e))
            raise BackendError(fallback) from e

        if response.is_error:
            raise BackendError(
                error_message(response, fallback),
                upstream_status=response.status_code,
            )
        return response

    async def get_json(self, path: str, params: dict | None = None, fallback: str = GENERIC_ERROR) -> Any:
        response = await self.request("GET", path, params=params, fallback=fallback)
        return response.json()

    async def post_json(self, path: str, payload: Any = None, fallback: str = GENERIC_ERROR) -> Any:
        response = await self.request("POST", path, json=payload, fallback=fallback)
        return _json_or_none(response)

    async def put_json(self, path: str, payload: Any, fallback: str = GENERIC_ERROR) -> Any:
        response = await self.request("PUT", path, json=payload, fallback=fallback)
        return _json_or_none(response)

    async def patch_json(self, path: str, payload: Any, fallback: str = GENERIC_ERROR) -> Any:
        response = await self.request("PATCH", path, json=payload, fallback=fallback)
        return _json_or_none(response)

    async def delete(self, path: str, fallback: str = GENERIC_ERROR) -> None:
        await self.request("DELETE", path, fallback=fallback)


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
