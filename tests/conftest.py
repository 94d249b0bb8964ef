"""
Pytest configuration and fixtures.

Provides reusable test fixtures for:
- Controllable clocks for TTL and circuit breaker tests
- Scripted providers for fallback tests
- Sample addresses and token data
"""

from collections.abc import Callable
from typing import Any

import pytest

from token_service.core.exceptions import DataFetchError
from token_service.core.models import (
    TokenBalance,
    TokenInfo,
    TokenPrice,
    WalletPortfolio,
)
from token_service.core.protocols import Capability
from token_service.services.token_data.aggregator import TokenService
from token_service.services.token_data.mock_provider import MockTokenDataProvider

ALL_CAPABILITIES = frozenset(Capability)

# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedProvider:
    """
    Provider whose answers are set per operation.

    Each answer is either a value to return, an exception to raise, or a
    callable taking the subject. Every call is recorded in `calls`.
    """

    def __init__(
        self,
        name: str,
        priority: int,
        capabilities: frozenset[Capability] = ALL_CAPABILITIES,
        **answers: Any,
    ):
        self.name = name
        self.priority = priority
        self.capabilities = capabilities
        self.answers = answers
        self.calls: list[tuple[str, str]] = []

    async def _answer(self, operation: str, subject: str) -> Any:
        self.calls.append((operation, subject))
        answer = self.answers.get(operation)
        if answer is None:
            raise DataFetchError(technical_message=f"{self.name}: no {operation}")
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(subject)
        return answer

    async def get_token_price(self, mint: str) -> TokenPrice:
        return await self._answer("price", mint)

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        return await self._answer("metadata", mint)

    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        return await self._answer("balances", address)

    async def get_wallet_portfolio(self, address: str) -> WalletPortfolio:
        return await self._answer("portfolio", address)


def price_for(prices: dict[str, float], provider: str = "scripted") -> Callable:
    """Answer callable returning a TokenPrice from a mint -> USD table."""

    def _answer(mint: str) -> TokenPrice:
        if mint not in prices:
            raise DataFetchError(technical_message=f"{provider}: no price for {mint}")
        return TokenPrice(
            mint=mint, price_usd=prices[mint], provider=provider, fetched_at_ms=0
        )

    return _answer


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def valid_solana_address() -> str:
    """Valid Solana token address (USDC)."""
    return "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


@pytest.fixture
def another_valid_address() -> str:
    """Another valid Solana address (wrapped SOL)."""
    return "So11111111111111111111111111111111111111112"


@pytest.fixture
def wallet_address() -> str:
    """Valid wallet address."""
    return "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


@pytest.fixture
def invalid_addresses() -> list[str]:
    """List of invalid addresses for testing."""
    return [
        "",  # Empty
        "   ",  # Whitespace
        "abc",  # Too short
        "0x742d35Cc6634C0532925a3b844Bc9e7595f5bEb2",  # Ethereum
        "So11111111111111111111111111111111111111112!",  # Invalid char
        "O0Il" * 11,  # Invalid base58 chars
    ]


@pytest.fixture
def usdc_price(valid_solana_address: str) -> TokenPrice:
    return TokenPrice(
        mint=valid_solana_address,
        price_usd=1.0,
        price_change_percentage_24h=0.01,
        provider="primary",
        fetched_at_ms=1_700_000_000_000,
    )


@pytest.fixture
def usdc_info(valid_solana_address: str) -> TokenInfo:
    return TokenInfo(
        mint=valid_solana_address, name="USD Coin", symbol="USDC", decimals=6
    )


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_token_provider() -> MockTokenDataProvider:
    """Mock token data provider."""
    return MockTokenDataProvider()


@pytest.fixture
def mock_service(mock_token_provider: MockTokenDataProvider) -> TokenService:
    """TokenService backed only by the mock provider."""
    return TokenService(providers=[mock_token_provider])
