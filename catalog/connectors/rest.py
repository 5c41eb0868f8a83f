"""
REST/JSON Protocol Handler.

HTTP layer the store adapters build on:
- Async GET requests via httpx, one client per store
- Optional retries with exponential backoff on transport errors
- Translation of transport and status failures into catalog errors
"""

from typing import Any

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from catalog.errors import StoreAuthError, StoreResponseError, StoreTransportError

# Failures worth another attempt; status errors never are
RETRYABLE_ERRORS = (httpx.TimeoutException, httpx.NetworkError)


class RestProtocol:
    """
    REST API protocol handler for one base URL.

    Retries are disabled unless ``max_retries`` > 0. Status codes >= 400 are
    raised as StoreResponseError (StoreAuthError for 401/403), transport
    failures as StoreTransportError.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        max_retries: int = 0,
        retry_delay: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Args:
            base_url: Base URL for all requests
            headers: Headers sent with every request (credentials, ...)
            timeout: Request timeout in seconds
            max_retries: Extra attempts after a transport failure
            retry_delay: Backoff multiplier in seconds
            http_client: Optional shared HTTP client; never closed here
        """
        self.base_url = base_url.rstrip("/")
        self.default_headers = {
            "Accept": "application/json",
            "User-Agent": "PetroCore/1.0",
            **(headers or {}),
        }
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay

        self._http_client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this handler created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """The HTTP client, created on first use."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
            self._owns_client = True
        return self._http_client

    def build_url(self, path: str) -> str:
        """Join ``path`` onto the base URL; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _send(
        self,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str],
    ) -> httpx.Response:
        """Issue a GET, retrying transport failures when configured."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.retry_delay, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(f"Retrying GET {url} (attempt {attempt.retry_state.attempt_number})")
                return await self.client.get(url, params=params, headers=headers)
        raise AssertionError("unreachable")  # pragma: no cover

    async def get_raw(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        GET ``path`` and return the successful response.

        Raises:
            StoreTransportError: For timeouts and network failures
            StoreAuthError: For 401/403 responses
            StoreResponseError: For other 4xx/5xx responses
        """
        url = self.build_url(path)
        query = {k: v for k, v in (params or {}).items() if v is not None}
        request_headers = {**self.default_headers, **(headers or {})}

        logger.debug(f"GET {url} {query}")

        try:
            response = await self._send(url, query, request_headers)
        except httpx.TransportError as e:
            raise StoreTransportError(f"GET {url} failed: {e}") from e

        if response.status_code >= 400:
            raise self._status_error(response)
        return response

    @staticmethod
    def _status_error(response: httpx.Response) -> StoreResponseError:
        """Build the error for a failed response, using PostgREST's message when present."""
        message = response.text[:200]
        code = None
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error") or message
            code = payload.get("code")

        error_cls = StoreAuthError if response.status_code in (401, 403) else StoreResponseError
        return error_cls(
            f"HTTP {response.status_code} for {response.request.url}: {message}",
            status_code=response.status_code,
            code=str(code) if code is not None else None,
        )
