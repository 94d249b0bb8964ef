"""
Core module - models, protocols, and exceptions.

This module contains the fundamental building blocks of the service:
- Data models (Pydantic)
- Protocol definitions (interfaces)
- Custom exceptions
"""

from token_service.core.exceptions import (
    AddressValidationError,
    AggregateFailureError,
    ApiRequestError,
    AuthenticationError,
    CircuitOpenError,
    ConfigurationError,
    DataFetchError,
    NotFoundError,
    ProviderFailure,
    RateLimitError,
    TokenServiceError,
    TransportError,
)
from token_service.core.models import (
    NATIVE_SOL_MINT,
    PROVIDER_NAMES,
    ProviderConfig,
    TokenBalance,
    TokenInfo,
    TokenPrice,
    TokenServiceConfig,
    WalletPortfolio,
)
from token_service.core.protocols import Capability, TokenDataProvider

__all__ = [
    # Exceptions
    "TokenServiceError",
    "AddressValidationError",
    "ConfigurationError",
    "DataFetchError",
    "ApiRequestError",
    "TransportError",
    "RateLimitError",
    "AuthenticationError",
    "NotFoundError",
    "CircuitOpenError",
    "AggregateFailureError",
    "ProviderFailure",
    # Models
    "NATIVE_SOL_MINT",
    "PROVIDER_NAMES",
    "ProviderConfig",
    "TokenServiceConfig",
    "TokenPrice",
    "TokenInfo",
    "TokenBalance",
    "WalletPortfolio",
    # Protocols
    "Capability",
    "TokenDataProvider",
]
