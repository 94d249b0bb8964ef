"""
Token data aggregation service.

TokenService fronts several token data providers and returns the first
successful answer, trying providers one at a time in priority order.

For every operation it:
1. Validates the address (fails fast, no provider contacted)
2. Returns a cached result when one is still fresh
3. Tries each provider that supports the operation, in priority order
4. Caches and returns the first success
5. Raises AggregateFailureError listing every provider's failure

Wallet portfolios are additionally enriched with prices fetched
concurrently through get_token_price.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from token_service.core.exceptions import (
    AggregateFailureError,
    ConfigurationError,
    ProviderFailure,
    TokenServiceError,
)
from token_service.core.models import (
    NATIVE_SOL_MINT,
    TokenBalance,
    TokenInfo,
    TokenPrice,
    TokenServiceConfig,
    WalletPortfolio,
    merge_price,
)
from token_service.core.protocols import Capability, TokenDataProvider
from token_service.services.http.circuit_breaker import CircuitBreaker
from token_service.services.token_data.birdeye_provider import BirdeyeTokenDataProvider
from token_service.services.token_data.cache import ResultCache
from token_service.services.token_data.coingecko_provider import (
    CoinGeckoTokenDataProvider,
)
from token_service.services.token_data.coinmarketcap_provider import (
    CoinMarketCapTokenDataProvider,
)
from token_service.services.token_data.helius_provider import HeliusTokenDataProvider
from token_service.services.token_data.jupiter_provider import JupiterTokenDataProvider
from token_service.services.token_data.solscan_provider import SolscanTokenDataProvider
from token_service.utils.validators import ensure_solana_address

logger = logging.getLogger(__name__)

# Provider classes by configuration block name
PROVIDER_REGISTRY: dict[str, type] = {
    "helius": HeliusTokenDataProvider,
    "jupiter": JupiterTokenDataProvider,
    "birdeye": BirdeyeTokenDataProvider,
    "solscan": SolscanTokenDataProvider,
    "coinmarketcap": CoinMarketCapTokenDataProvider,
    "coingecko": CoinGeckoTokenDataProvider,
}

# Provider method serving each capability
_CAPABILITY_METHODS = {
    Capability.TOKEN_PRICE: "get_token_price",
    Capability.TOKEN_METADATA: "get_token_metadata",
    Capability.TOKEN_BALANCES: "get_token_balances",
    Capability.WALLET_PORTFOLIO: "get_wallet_portfolio",
}

TOKEN_DATA_OPERATION = "token-data"


def cache_key(operation: str, subject: str) -> str:
    """Cache key for an operation on a mint or wallet address."""
    return f"{operation}:{subject}"


class TokenService:
    """
    Aggregates token data from multiple providers with fallback.

    Providers are sorted once, at construction, by ascending priority.
    Each call tries them strictly one after another; a lower-ranked
    provider is only contacted after the higher-ranked one has failed.

    Usage:
        service = TokenService({"helius": {"api_key": "..."}, "jupiter": {"api_key": ""}})
        price = await service.get_token_price("So111...")
    """

    def __init__(
        self,
        config: TokenServiceConfig | Mapping[str, Any] | None = None,
        *,
        providers: Sequence[TokenDataProvider] = (),
        cache: ResultCache | None = None,
    ):
        """
        Initialize service.

        Args:
            config: Provider blocks and cache/resilience settings
            providers: Extra provider instances to include
            cache: Result cache, used as given even when empty (a fresh
                in-memory cache by default)

        Raises:
            ConfigurationError: If the config is invalid or no provider
                ends up configured
        """
        self._config = self._load_config(config)
        self._cache = cache if cache is not None else ResultCache()
        self._price_ttl = self._config.price_cache_ttl
        self._default_ttl = self._config.cache_ttl

        configured = self._create_providers(self._config) + list(providers)
        if not configured:
            raise ConfigurationError(
                technical_message="No token data providers configured"
            )

        # Stable sort: equal priorities keep configuration order
        self._providers: tuple[TokenDataProvider, ...] = tuple(
            sorted(configured, key=lambda p: p.priority)
        )

        logger.info(
            "TokenService initialized with providers: "
            + ", ".join(f"{p.name}({p.priority})" for p in self._providers)
        )

    @staticmethod
    def _load_config(
        config: TokenServiceConfig | Mapping[str, Any] | None,
    ) -> TokenServiceConfig:
        if isinstance(config, TokenServiceConfig):
            return config
        try:
            return TokenServiceConfig.model_validate(dict(config or {}))
        except PydanticValidationError as e:
            raise ConfigurationError(
                message="Invalid token service configuration.",
                technical_message=f"Invalid token service configuration: {e}",
            ) from e

    @staticmethod
    def _create_providers(config: TokenServiceConfig) -> list[TokenDataProvider]:
        """Instantiate an adapter for every configured provider block."""
        providers = []
        for name, block in config.provider_blocks().items():
            provider_class = PROVIDER_REGISTRY[name]
            logger.debug(f"Creating {provider_class.__name__}")
            providers.append(
                provider_class(
                    block,
                    circuit_breaker=CircuitBreaker(
                        threshold=config.circuit_failure_threshold,
                        reset_timeout=config.circuit_reset_timeout,
                    ),
                    retry_backoff=config.retry_backoff,
                )
            )
        return providers

    @property
    def providers(self) -> tuple[TokenDataProvider, ...]:
        """Providers in fallback order."""
        return self._providers

    @property
    def cache(self) -> ResultCache:
        return self._cache

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def get_token_price(self, mint: str) -> TokenPrice:
        """
        Get a token's USD price.

        Raises:
            AddressValidationError: If mint is not a valid address
            AggregateFailureError: If every provider failed
        """
        ensure_solana_address(mint, field="mint")
        return await self._fetch(Capability.TOKEN_PRICE, mint, self._price_ttl)

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        """
        Get token metadata (name, symbol, decimals, logo).

        Raises:
            AddressValidationError: If mint is not a valid address
            AggregateFailureError: If every provider failed
        """
        ensure_solana_address(mint, field="mint")
        return await self._fetch(Capability.TOKEN_METADATA, mint, self._default_ttl)

    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        """
        Get a wallet's token balances.

        Providers without the balances capability are skipped.

        Raises:
            AddressValidationError: If address is not a valid address
            AggregateFailureError: If every capable provider failed
        """
        ensure_solana_address(address, field="address")
        return await self._fetch(Capability.TOKEN_BALANCES, address, self._default_ttl)

    async def get_wallet_portfolio(self, address: str) -> WalletPortfolio:
        """
        Get a wallet's portfolio enriched with USD prices.

        If no provider can return a portfolio directly, the portfolio is
        rebuilt from get_token_balances with an unknown (zero) SOL
        balance. Either way prices are merged in before caching.

        Raises:
            AddressValidationError: If address is not a valid address
            AggregateFailureError: If both the direct lookup and the
                reconstruction failed
        """
        ensure_solana_address(address, field="address")

        key = cache_key(Capability.WALLET_PORTFOLIO.value, address)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        failures: list[ProviderFailure] = []
        try:
            portfolio = await self._first_success(
                Capability.WALLET_PORTFOLIO, address, failures
            )
        except AggregateFailureError:
            logger.info(
                f"Direct portfolio lookup failed for {address[:8]}, "
                "rebuilding from token balances"
            )
            try:
                balances = await self.get_token_balances(address)
            except AggregateFailureError as e:
                failures.append(ProviderFailure.from_exception("fallback", e))
                raise AggregateFailureError(
                    Capability.WALLET_PORTFOLIO.value, address, failures
                ) from e

            portfolio = WalletPortfolio(address=address, sol_balance=0.0, tokens=balances)

        enriched = await self._enrich_portfolio(portfolio)
        self._cache.set(key, enriched, self._default_ttl)
        return enriched

    async def get_token_data(self, mint: str) -> TokenInfo:
        """
        Get token metadata merged with its current price.

        Metadata and price are fetched concurrently and each may fail on
        its own: missing metadata degrades to an empty placeholder,
        a missing price leaves the price fields unset.

        Raises:
            AddressValidationError: If mint is not a valid address
            AggregateFailureError: If the results could not be combined
        """
        ensure_solana_address(mint, field="mint")

        key = cache_key(TOKEN_DATA_OPERATION, mint)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        metadata, price = await asyncio.gather(
            self._metadata_or_placeholder(mint),
            self._price_or_none(mint),
        )

        try:
            token_data = merge_price(metadata, price)
        except Exception as e:
            raise AggregateFailureError(
                TOKEN_DATA_OPERATION,
                mint,
                [ProviderFailure.from_exception("combine", e)],
            ) from e

        self._cache.set(key, token_data, self._price_ttl)
        return token_data

    def invalidate(self, operation: Capability | str, subject: str) -> None:
        """Drop the cached result of one operation for one subject."""
        name = operation.value if isinstance(operation, Capability) else operation
        self._cache.delete(cache_key(name, subject))

    def clear_cache(self) -> None:
        self._cache.clear()

    async def close(self) -> None:
        """Release provider resources (HTTP sessions)."""
        for provider in self._providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> "TokenService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Fallback loop
    # ------------------------------------------------------------------

    async def _fetch(self, operation: Capability, subject: str, ttl: float) -> Any:
        """Cache check, fallback loop, cache write."""
        key = cache_key(operation.value, subject)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        result = await self._first_success(operation, subject, [])
        self._cache.set(key, result, ttl)
        return result

    async def _first_success(
        self,
        operation: Capability,
        subject: str,
        failures: list[ProviderFailure],
    ) -> Any:
        """
        Try providers in priority order until one succeeds.

        Failures are appended to `failures` as they happen.

        Raises:
            AggregateFailureError: If no capable provider succeeded
        """
        method_name = _CAPABILITY_METHODS[operation]

        for provider in self._providers:
            if operation not in provider.capabilities:
                continue

            try:
                result = await getattr(provider, method_name)(subject)
            except Exception as e:
                # One provider's failure never aborts the loop
                logger.warning(
                    f"{provider.name} failed {operation.value} for {subject[:8]}: {e}"
                )
                failures.append(ProviderFailure.from_exception(provider.name, e))
                continue

            logger.debug(f"{operation.value} for {subject[:8]} served by {provider.name}")
            return result

        raise AggregateFailureError(operation.value, subject, failures)

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    async def _price_or_none(self, mint: str) -> TokenPrice | None:
        try:
            return await self.get_token_price(mint)
        except TokenServiceError as e:
            logger.warning(f"Failed to get price for token {mint}: {e}")
            return None

    async def _metadata_or_placeholder(self, mint: str) -> TokenInfo:
        try:
            return await self.get_token_metadata(mint)
        except TokenServiceError as e:
            logger.warning(f"Failed to get token metadata for {mint}: {e}")
            return TokenInfo(mint=mint, name="", symbol="", decimals=0)

    async def _enrich_portfolio(self, portfolio: WalletPortfolio) -> WalletPortfolio:
        """
        Return a copy of the portfolio with prices and total value.

        SOL and every distinct token mint are priced concurrently. A token
        whose price cannot be fetched keeps no price and adds nothing to the total.
        """
        # Each distinct mint is priced once, wrapped SOL included
        mints = list(
            dict.fromkeys([NATIVE_SOL_MINT, *(t.mint for t in portfolio.tokens)])
        )
        fetched = await asyncio.gather(*(self._price_or_none(mint) for mint in mints))
        prices = dict(zip(mints, fetched))

        sol_price = prices[NATIVE_SOL_MINT]
        total_value_usd = portfolio.sol_balance * (sol_price.price_usd if sol_price else 0.0)

        tokens = []
        for token in portfolio.tokens:
            price = prices[token.mint]
            if price is not None:
                total_value_usd += token.ui_amount * price.price_usd
                if token.token_info is not None:
                    token = token.model_copy(
                        update={"token_info": merge_price(token.token_info, price)}
                    )
            tokens.append(token)

        return portfolio.model_copy(
            update={"tokens": tokens, "total_value_usd": total_value_usd}
        )
