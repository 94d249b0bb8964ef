"""
Protocol definitions (interfaces) for token data providers.

Using typing.Protocol instead of ABC because:
1. Supports duck typing (no inheritance required)
2. Easier to mock in tests

Balances and portfolios are optional capabilities. Providers declare
what they support in `capabilities` and TokenService asks that set
instead of checking for methods.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from token_service.core.models import TokenInfo, TokenPrice


class Capability(str, Enum):
    """Operations a provider can serve."""

    TOKEN_PRICE = "token-price"
    TOKEN_METADATA = "token-metadata"
    TOKEN_BALANCES = "token-balances"
    WALLET_PORTFOLIO = "wallet-portfolio"


CORE_CAPABILITIES = frozenset({Capability.TOKEN_PRICE, Capability.TOKEN_METADATA})


@runtime_checkable
class TokenDataProvider(Protocol):
    """
    Protocol for token data providers.

    Implementations wrap one upstream API (Helius, Jupiter, Birdeye, ...).
    For development, MockTokenDataProvider returns fake data.

    get_token_balances(address) and get_wallet_portfolio(address) only
    need to exist when the matching Capability is listed in `capabilities`.
    """

    name: str
    """Provider name used in logs and error reports"""

    priority: int
    """Fallback rank, lower is tried first"""

    capabilities: frozenset[Capability]
    """Operations this provider implements"""

    async def get_token_price(self, mint: str) -> TokenPrice:
        """
        Fetch the USD price of a token.

        Raises:
            DataFetchError: If fetching fails
        """
        ...

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        """
        Fetch token metadata.

        Raises:
            DataFetchError: If fetching fails
        """
        ...

