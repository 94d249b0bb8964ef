"""
Shared glue for HTTP-backed provider adapters.

Each adapter owns one RequestExecutor (and therefore one circuit
breaker), built from its ProviderConfig. Subclasses only map the
upstream payloads onto the service models.
"""

import logging
import time
from typing import Any

import aiohttp

from token_service.core.exceptions import DataFetchError
from token_service.core.models import ProviderConfig, TokenPrice
from token_service.core.protocols import CORE_CAPABILITIES, Capability
from token_service.services.http.circuit_breaker import CircuitBreaker
from token_service.services.http.executor import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_TIMEOUT,
    RequestExecutor,
)


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


def to_float(value: Any) -> float | None:
    """Parse a numeric field that may be missing, null or a string."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class BaseHttpProvider:
    """
    Base class for providers that talk to a REST/JSON-RPC API.

    Class attributes to override:
        name: Provider name
        default_priority: Rank used when the config has none
        default_base_url: Endpoint used when the config has none
        capabilities: Operations the provider implements
    """

    name: str = "base"
    default_priority: int = 10
    default_base_url: str = ""
    capabilities: frozenset[Capability] = CORE_CAPABILITIES

    def __init__(
        self,
        config: ProviderConfig,
        *,
        circuit_breaker: CircuitBreaker | None = None,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        session: aiohttp.ClientSession | None = None,
    ):
        """
        Initialize provider.

        Args:
            config: Provider configuration (API key, endpoint, limits)
            circuit_breaker: Breaker for this provider's executor
            retry_backoff: Base delay for retry backoff in seconds
            session: Shared aiohttp session
        """
        self._config = config
        self.priority = (
            config.priority if config.priority is not None else self.default_priority
        )
        self._executor = RequestExecutor(
            self.name,
            config.base_url or self.default_base_url,
            timeout=config.timeout or DEFAULT_TIMEOUT,
            max_retries=(
                config.max_retries
                if config.max_retries is not None
                else DEFAULT_MAX_RETRIES
            ),
            headers=self._default_headers(),
            circuit_breaker=circuit_breaker,
            retry_backoff=retry_backoff,
            session=session,
            logger=logging.getLogger(type(self).__module__),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def _default_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        if not self._config.api_key:
            return {}
        return {"Authorization": f"Bearer {self._config.api_key}"}

    def _build_price(self, mint: str, price_usd: Any, **fields: Any) -> TokenPrice:
        """Build a TokenPrice stamped with this provider and the current time."""
        price = to_float(price_usd)
        if price is None:
            raise DataFetchError(
                technical_message=f"{self.name}: price data not available for {mint}"
            )
        return TokenPrice(
            mint=mint,
            price_usd=price,
            provider=self.name,
            fetched_at_ms=now_ms(),
            **fields,
        )

    async def close(self) -> None:
        await self._executor.close()
