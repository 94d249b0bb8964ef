"""
Mock token data provider for development.

Generates realistic-looking token data without making actual API calls.
Uses deterministic random generation based on address for consistent results.
"""

import hashlib
import random

from token_service.core.models import (
    NATIVE_SOL_MINT,
    TokenBalance,
    TokenInfo,
    TokenPrice,
    WalletPortfolio,
)
from token_service.core.protocols import Capability
from token_service.services.token_data.base import now_ms


def _rng_for(address: str) -> random.Random:
    """Create deterministic RNG seeded by address."""
    seed = int(hashlib.md5(address.encode()).hexdigest(), 16) % (2**32)
    return random.Random(seed)


class MockTokenDataProvider:
    """
    Mock implementation of TokenDataProvider protocol.

    Generates fake but realistic token data for development and testing.
    The same address always returns the same data (deterministic).

    Usage:
        provider = MockTokenDataProvider()
        price = await provider.get_token_price("So111...")
    """

    # (name, symbol, mint, decimals) of real tokens used for mocking
    MOCK_TOKENS = [
        ("Bonk", "BONK", "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", 5),
        ("Jupiter", "JUP", "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN", 6),
        ("USD Coin", "USDC", "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", 6),
        ("Marinade staked SOL", "mSOL", "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So", 9),
        ("Raydium", "RAY", "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R", 6),
    ]

    capabilities = frozenset(
        {
            Capability.TOKEN_PRICE,
            Capability.TOKEN_METADATA,
            Capability.TOKEN_BALANCES,
            Capability.WALLET_PORTFOLIO,
        }
    )

    def __init__(self, name: str = "mock", priority: int = 100):
        self.name = name
        self.priority = priority

    async def get_token_price(self, mint: str) -> TokenPrice:
        """
        Generate a mock price for the given mint.

        SOL is priced in a realistic range, everything else between
        fractions of a cent and a few dollars.
        """
        rng = _rng_for(mint)
        if mint == NATIVE_SOL_MINT:
            price = rng.uniform(80, 250)
        else:
            price = 10 ** rng.uniform(-6, 1)

        return TokenPrice(
            mint=mint,
            price_usd=round(price, 8),
            price_change_percentage_24h=round(rng.uniform(-20, 20), 2),
            volume_24h=round(rng.uniform(1_000, 5_000_000), 2),
            market_cap=round(rng.uniform(100_000, 1_000_000_000), 2),
            provider=self.name,
            fetched_at_ms=now_ms(),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        """Generate mock metadata; known mints keep their real symbol."""
        for name, symbol, known_mint, decimals in self.MOCK_TOKENS:
            if known_mint == mint:
                return TokenInfo(mint=mint, name=name, symbol=symbol, decimals=decimals)

        if mint == NATIVE_SOL_MINT:
            return TokenInfo(mint=mint, name="Wrapped SOL", symbol="SOL", decimals=9)

        rng = _rng_for(mint)
        name, symbol, _, decimals = rng.choice(self.MOCK_TOKENS)
        return TokenInfo(mint=mint, name=name, symbol=symbol, decimals=decimals)

    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        """Generate a handful of holdings for the wallet."""
        rng = _rng_for(address)
        holdings = rng.sample(self.MOCK_TOKENS, k=rng.randint(1, len(self.MOCK_TOKENS)))

        return [
            TokenBalance(
                mint=mint,
                raw_amount=str(rng.randint(1, 10_000) * 10**decimals),
                decimals=decimals,
                token_info=TokenInfo(
                    mint=mint, name=name, symbol=symbol, decimals=decimals
                ),
            )
            for name, symbol, mint, decimals in holdings
        ]

    async def get_wallet_portfolio(self, address: str) -> WalletPortfolio:
        rng = _rng_for(address)
        sol_balance = round(rng.uniform(0, 50), 4)
        return WalletPortfolio(
            address=address,
            sol_balance=sol_balance,
            tokens=await self.get_token_balances(address),
        )
