"""
Solana token data aggregation service.

Fetches token prices, metadata, wallet balances and portfolios from
several data providers, falling back from one to the next in priority
order, with caching and per-provider circuit breakers.
"""

from token_service.core.exceptions import (
    AddressValidationError,
    AggregateFailureError,
    ConfigurationError,
    DataFetchError,
    TokenServiceError,
)
from token_service.core.models import (
    ProviderConfig,
    TokenBalance,
    TokenInfo,
    TokenPrice,
    TokenServiceConfig,
    WalletPortfolio,
)
from token_service.services.token_data.aggregator import TokenService

__all__ = [
    "TokenService",
    "TokenServiceConfig",
    "ProviderConfig",
    "TokenPrice",
    "TokenInfo",
    "TokenBalance",
    "WalletPortfolio",
    "TokenServiceError",
    "AddressValidationError",
    "ConfigurationError",
    "DataFetchError",
    "AggregateFailureError",
]
