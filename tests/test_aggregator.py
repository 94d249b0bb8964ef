"""
Tests for TokenService fallback, caching and validation.

Tests cover:
- Address validation before any provider is contacted
- Cache short-circuit and TTL expiry
- Priority-ordered fallback
- Aggregated failure reporting
- Construction from configuration
"""

from unittest.mock import AsyncMock

import pytest

from token_service.core.exceptions import (
    AddressValidationError,
    AggregateFailureError,
    ConfigurationError,
    DataFetchError,
    NotFoundError,
)
from token_service.core.models import PROVIDER_NAMES, TokenInfo, TokenPrice
from token_service.core.protocols import CORE_CAPABILITIES, Capability, TokenDataProvider
from token_service.services.token_data.aggregator import (
    PROVIDER_REGISTRY,
    TokenService,
)
from token_service.services.token_data.cache import ResultCache
from token_service.services.token_data.helius_provider import HeliusTokenDataProvider
from token_service.services.token_data.jupiter_provider import JupiterTokenDataProvider

from tests.conftest import FakeClock, ScriptedProvider


class TestAddressValidation:
    """Invalid addresses are rejected before any provider call."""

    @pytest.mark.asyncio
    async def test_invalid_mint_never_reaches_providers(
        self, invalid_addresses: list[str]
    ) -> None:
        provider = ScriptedProvider("spy", 1)
        service = TokenService(providers=[provider])

        for address in invalid_addresses:
            with pytest.raises(AddressValidationError):
                await service.get_token_price(address)
            with pytest.raises(AddressValidationError):
                await service.get_token_metadata(address)
            with pytest.raises(AddressValidationError):
                await service.get_token_data(address)
            with pytest.raises(AddressValidationError):
                await service.get_token_balances(address)
            with pytest.raises(AddressValidationError):
                await service.get_wallet_portfolio(address)

        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_invalid_address_not_cached(self) -> None:
        service = TokenService(providers=[ScriptedProvider("spy", 1)])

        with pytest.raises(AddressValidationError):
            await service.get_token_price("abc")

        assert len(service.cache) == 0


class TestCaching:
    """Fresh cached results are returned without provider calls."""

    @pytest.mark.asyncio
    async def test_seeded_cache_short_circuits(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        provider = ScriptedProvider("spy", 1)
        service = TokenService(providers=[provider])
        service.cache.set(f"token-price:{valid_solana_address}", usdc_price, ttl=60)

        result = await service.get_token_price(valid_solana_address)

        assert result is usdc_price
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        provider = ScriptedProvider("primary", 1, price=usdc_price)
        service = TokenService(providers=[provider])

        first = await service.get_token_price(valid_solana_address)
        second = await service.get_token_price(valid_solana_address)

        assert first is second
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_price_ttl_expiry(
        self, valid_solana_address: str, usdc_price: TokenPrice, clock: FakeClock
    ) -> None:
        """Prices live for price_cache_ttl, metadata for cache_ttl."""
        provider = ScriptedProvider(
            "primary",
            1,
            price=usdc_price,
            metadata=TokenInfo(mint=valid_solana_address, symbol="USDC", decimals=6),
        )
        service = TokenService(
            {"price_cache_ttl": 60, "cache_ttl": 300},
            providers=[provider],
            cache=ResultCache(clock=clock),
        )

        await service.get_token_price(valid_solana_address)
        await service.get_token_metadata(valid_solana_address)
        clock.advance(61)
        await service.get_token_price(valid_solana_address)
        await service.get_token_metadata(valid_solana_address)

        operations = [operation for operation, _ in provider.calls]
        assert operations == ["price", "metadata", "price"]

    @pytest.mark.asyncio
    async def test_failures_not_cached(self, valid_solana_address: str) -> None:
        provider = ScriptedProvider("primary", 1)
        service = TokenService(providers=[provider])

        for _ in range(2):
            with pytest.raises(AggregateFailureError):
                await service.get_token_price(valid_solana_address)

        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_invalidate_and_clear(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        provider = ScriptedProvider("primary", 1, price=usdc_price)
        service = TokenService(providers=[provider])

        await service.get_token_price(valid_solana_address)
        service.invalidate(Capability.TOKEN_PRICE, valid_solana_address)
        await service.get_token_price(valid_solana_address)
        service.clear_cache()
        await service.get_token_price(valid_solana_address)

        assert len(provider.calls) == 3


class TestFallback:
    """Providers are tried strictly in priority order."""

    @pytest.mark.asyncio
    async def test_first_success_wins(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        first = ScriptedProvider("first", 1, price=usdc_price)
        second = ScriptedProvider("second", 2, price=usdc_price)
        service = TokenService(providers=[second, first])

        await service.get_token_price(valid_solana_address)

        assert len(first.calls) == 1
        assert second.calls == []

    @pytest.mark.asyncio
    async def test_falls_back_after_failure(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        failing = ScriptedProvider(
            "failing", 1, price=NotFoundError("/price", "token")
        )
        backup = ScriptedProvider("backup", 2, price=usdc_price)
        service = TokenService(providers=[failing, backup])

        result = await service.get_token_price(valid_solana_address)

        assert result is usdc_price
        assert len(failing.calls) == 1
        assert len(backup.calls) == 1

    @pytest.mark.asyncio
    async def test_unexpected_exceptions_fall_through(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        """A provider bug does not abort the fallback loop."""
        broken = ScriptedProvider("broken", 1, price=KeyError("data"))
        backup = ScriptedProvider("backup", 2, price=usdc_price)
        service = TokenService(providers=[broken, backup])

        assert await service.get_token_price(valid_solana_address) is usdc_price

    @pytest.mark.asyncio
    async def test_sequential_not_concurrent(
        self, valid_solana_address: str, usdc_price: TokenPrice
    ) -> None:
        """The backup is only called after the primary has finished failing."""
        order: list[str] = []

        async def primary_price(mint: str) -> TokenPrice:
            order.append("primary:start")
            order.append("primary:end")
            raise DataFetchError(technical_message="primary down")

        async def backup_price(mint: str) -> TokenPrice:
            order.append("backup")
            return usdc_price

        primary = ScriptedProvider("primary", 1)
        primary.get_token_price = AsyncMock(side_effect=primary_price)
        backup = ScriptedProvider("backup", 2)
        backup.get_token_price = AsyncMock(side_effect=backup_price)
        service = TokenService(providers=[backup, primary])

        await service.get_token_price(valid_solana_address)

        assert order == ["primary:start", "primary:end", "backup"]

    @pytest.mark.asyncio
    async def test_skips_providers_without_capability(
        self, wallet_address: str
    ) -> None:
        price_only = ScriptedProvider(
            "price-only", 1, capabilities=CORE_CAPABILITIES, balances=[]
        )
        full = ScriptedProvider("full", 2, balances=[])
        service = TokenService(providers=[price_only, full])

        assert await service.get_token_balances(wallet_address) == []
        assert price_only.calls == []
        assert full.calls == [("balances", wallet_address)]


class TestTotalFailure:
    """All providers failing raises AggregateFailureError."""

    @pytest.mark.asyncio
    async def test_message_lists_every_provider(self, valid_solana_address: str) -> None:
        service = TokenService(
            providers=[
                ScriptedProvider(
                    "alpha", 1, price=DataFetchError(technical_message="alpha broke")
                ),
                ScriptedProvider(
                    "beta", 2, price=DataFetchError(technical_message="beta broke")
                ),
            ]
        )

        with pytest.raises(AggregateFailureError) as exc_info:
            await service.get_token_price(valid_solana_address)

        error = exc_info.value
        assert str(error) == (
            f"Failed to get token-price for {valid_solana_address}: "
            "alpha: alpha broke, beta: beta broke"
        )
        assert error.providers == ["alpha", "beta"]
        assert error.failures[0].kind == "DataFetchError"
        assert error.operation == "token-price"

    @pytest.mark.asyncio
    async def test_no_capable_provider(self, wallet_address: str) -> None:
        service = TokenService(
            providers=[ScriptedProvider("price-only", 1, capabilities=CORE_CAPABILITIES)]
        )

        with pytest.raises(AggregateFailureError) as exc_info:
            await service.get_token_balances(wallet_address)

        assert exc_info.value.failures == []
        assert "no configured provider" in str(exc_info.value)


class TestConstruction:
    """Building the service from configuration."""

    def test_no_providers_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            TokenService({})

    def test_invalid_config_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            TokenService({"helius": {"timeout": -1}})

    def test_unknown_provider_block_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            TokenService({"pyth": {"api_key": "x"}})

    def test_sorted_by_priority(self) -> None:
        service = TokenService(
            {
                "jupiter": {"api_key": ""},
                "helius": {"api_key": "key"},
            },
            providers=[ScriptedProvider("first", 0), ScriptedProvider("last", 50)],
        )

        assert [p.name for p in service.providers] == ["first", "helius", "jupiter", "last"]

    def test_priority_override(self) -> None:
        service = TokenService(
            {
                "helius": {"api_key": "key", "priority": 9},
                "jupiter": {"api_key": ""},
            }
        )

        assert [p.name for p in service.providers] == ["jupiter", "helius"]

    def test_injected_empty_cache_is_used(self) -> None:
        cache = ResultCache()

        service = TokenService(providers=[ScriptedProvider("a", 1)], cache=cache)

        assert len(cache) == 0
        assert service.cache is cache

    def test_registry_covers_every_provider_block(self) -> None:
        assert set(PROVIDER_REGISTRY) == set(PROVIDER_NAMES)

    def test_optional_operations_announced_by_capabilities(self) -> None:
        service = TokenService({"helius": {"api_key": "key"}, "jupiter": {"api_key": ""}})
        helius, jupiter = service.providers

        assert isinstance(helius, TokenDataProvider)
        assert isinstance(jupiter, TokenDataProvider)
        assert Capability.TOKEN_BALANCES in helius.capabilities
        assert Capability.TOKEN_BALANCES not in jupiter.capabilities

    def test_equal_priority_keeps_order(self) -> None:
        service = TokenService(
            providers=[ScriptedProvider("a", 1), ScriptedProvider("b", 1)]
        )

        assert [p.name for p in service.providers] == ["a", "b"]

    def test_adapters_get_own_breakers(self) -> None:
        service = TokenService(
            {
                "helius": {"api_key": "key"},
                "jupiter": {"api_key": ""},
                "circuit_failure_threshold": 3,
                "circuit_reset_timeout": 1.0,
            }
        )
        helius, jupiter = service.providers

        assert isinstance(helius, HeliusTokenDataProvider)
        assert isinstance(jupiter, JupiterTokenDataProvider)
        assert helius.executor.circuit_breaker is not jupiter.executor.circuit_breaker
        assert helius.executor.circuit_breaker.threshold == 3
        assert helius.executor.circuit_breaker.reset_timeout == 1.0

    @pytest.mark.asyncio
    async def test_close_closes_providers(self) -> None:
        provider = ScriptedProvider("closable", 1)
        provider.close = AsyncMock()

        async with TokenService(providers=[provider]):
            pass

        provider.close.assert_awaited_once()
