"""
Resilient HTTP request executor.

Every provider adapter sends its requests through one RequestExecutor.
The executor adds the resilience policy on top of aiohttp:

1. Circuit breaker gating (CircuitOpenError without a network call)
2. Per-request timeout
3. Retry with exponential backoff for transport failures only
4. Classification of HTTP failures into typed errors

Client errors (401/403/404/429 and other 4xx) are raised after a single
attempt. Every failed attempt is counted by the circuit breaker, every
successful one closes it.
"""

import logging
from typing import Any

import aiohttp
import backoff

from token_service.core.exceptions import (
    ApiRequestError,
    AuthenticationError,
    CircuitOpenError,
    NotFoundError,
    RateLimitError,
    TransportError,
)
from token_service.services.http.circuit_breaker import BreakerStatus, CircuitBreaker

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3
# Base delay in seconds for exponential backoff between retries
DEFAULT_RETRY_BACKOFF = 0.5
MAX_RETRY_DELAY = 10.0


class RequestExecutor:
    """
    Issues HTTP requests for one provider with retries and a circuit breaker.

    The executor owns its CircuitBreaker; breakers are never shared
    between providers.

    Usage:
        executor = RequestExecutor("jupiter", "https://price.jup.ag/v4")
        data = await executor.get("token-price", "/price", params={"ids": mint})
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        headers: dict[str, str] | None = None,
        circuit_breaker: CircuitBreaker | None = None,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        session: aiohttp.ClientSession | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize executor.

        Args:
            name: Provider name (used in logs and errors)
            base_url: Prefix for every request path
            timeout: Per-request timeout in seconds
            max_retries: Retries after the first attempt
            headers: Headers sent with every request
            circuit_breaker: Breaker to use (a fresh one by default)
            retry_backoff: Base delay in seconds for exponential backoff
            session: Shared aiohttp session (not closed by the executor)
            logger: Sink for retry and circuit events
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._name = name
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max_retries
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._breaker = circuit_breaker or CircuitBreaker()
        self._retry_backoff = retry_backoff
        self._session = session
        self._owns_session = session is None
        self._logger = logger or logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self._name

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def circuit_breaker(self) -> CircuitBreaker:
        return self._breaker

    def can_request(self) -> bool:
        return self._breaker.can_request()

    async def get(
        self,
        operation_id: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self.execute(
            operation_id, "GET", path, params=params, headers=headers
        )

    async def post(
        self,
        operation_id: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self.execute(operation_id, "POST", path, json=json, headers=headers)

    async def execute(
        self,
        operation_id: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Perform one logical request.

        Args:
            operation_id: Label for logs (e.g. "token-price")
            method: HTTP method
            path: Path appended to base_url (may carry a query string)
            params: Query parameters
            json: JSON body
            headers: Extra headers for this request

        Returns:
            Decoded JSON body

        Raises:
            CircuitOpenError: If the circuit is open
            RateLimitError, AuthenticationError, NotFoundError: Client errors
            TransportError: If every attempt failed at transport level
            ApiRequestError: Other HTTP errors or undecodable bodies
        """
        if not self._breaker.can_request():
            raise CircuitOpenError(self._name, self._breaker.retry_in())

        # A half-open circuit allows exactly one trial attempt
        half_open = self._breaker.status is BreakerStatus.HALF_OPEN
        max_tries = 1 if half_open else self._max_retries + 1

        def _on_backoff(details: Any) -> None:
            self._logger.warning(
                f"Retry attempt {details['tries']} of {max_tries - 1} for "
                f"{self._name} {operation_id} ({path}) in {details['wait']:.2f}s: "
                f"{details.get('exception')}"
            )

        def _should_giveup(exc: Exception) -> bool:
            # Stop hammering a provider whose circuit just opened
            return self._breaker.status is BreakerStatus.OPEN

        @backoff.on_exception(
            backoff.expo,
            TransportError,
            max_tries=max_tries,
            factor=self._retry_backoff,
            max_value=MAX_RETRY_DELAY,
            jitter=backoff.full_jitter,
            giveup=_should_giveup,
            on_backoff=_on_backoff,
            logger=None,
        )
        async def _attempt() -> Any:
            return await self._attempt_once(
                operation_id, method, path, params=params, json=json, headers=headers
            )

        if not half_open:
            return await _attempt()

        try:
            return await _attempt()
        except BaseException as e:
            # A cancelled or crashed trial reopens the circuit like a failed one
            if self._breaker.status is BreakerStatus.HALF_OPEN:
                self._record_failure(operation_id, e)
            raise

    async def _attempt_once(
        self,
        operation_id: str,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None,
        json: Any,
        headers: dict[str, str] | None,
    ) -> Any:
        try:
            data = await self._send(method, path, params=params, json=json, headers=headers)
        except ApiRequestError as e:
            self._record_failure(operation_id, e)
            raise

        self._breaker.record_success()
        return data

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None,
        json: Any,
        headers: dict[str, str] | None,
    ) -> Any:
        session = await self._get_session()
        url = f"{self._base_url}{path}"
        request_headers = {**self._headers, **(headers or {})}
        timeout = aiohttp.ClientTimeout(total=self._timeout)

        try:
            async with session.request(
                method,
                url,
                params=params,
                json=json,
                headers=request_headers,
                timeout=timeout,
            ) as resp:
                if resp.status >= 400:
                    raise await self._classify(resp, path)

                try:
                    return await resp.json(content_type=None)
                except ValueError as e:
                    raise ApiRequestError(
                        f"Invalid JSON response: {e}", path, resp.status
                    ) from e

        except ApiRequestError:
            raise
        except TimeoutError:
            raise TransportError(
                f"Request timed out after {self._timeout}s", path
            ) from None
        except aiohttp.ClientError as e:
            raise TransportError(f"{type(e).__name__}: {e}", path) from e

    async def _classify(
        self, resp: aiohttp.ClientResponse, path: str
    ) -> ApiRequestError:
        """Map an error response to the matching exception."""
        status = resp.status

        if status == 429:
            return RateLimitError(path, _parse_retry_after(resp.headers.get("Retry-After")))

        if status in (401, 403):
            return AuthenticationError(path, status)

        if status == 404:
            return NotFoundError(path)

        detail = await _error_detail(resp)

        if status >= 500:
            return TransportError(detail, path, status)

        return ApiRequestError(detail, path, status)

    def _record_failure(self, operation_id: str, error: BaseException) -> None:
        was_open = self._breaker.status is BreakerStatus.OPEN
        if self._breaker.record_failure() and not was_open:
            self._logger.warning(
                f"Circuit breaker opened for {self._name} ({self._base_url}) "
                f"after {operation_id} failure: {error}"
            )

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if the executor created it."""
        if self._owns_session and self._session is not None:
            if not self._session.closed:
                await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RequestExecutor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


async def _error_detail(resp: aiohttp.ClientResponse) -> str:
    """Best message available from an error response."""
    try:
        body = await resp.json(content_type=None)
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, dict):
            message = message.get("message")
        if message:
            return str(message)

    return f"HTTP {resp.status} {resp.reason or ''}".strip()
