"""Token data services."""

from token_service.services.token_data.aggregator import TokenService
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
from token_service.services.token_data.mock_provider import MockTokenDataProvider
from token_service.services.token_data.solscan_provider import SolscanTokenDataProvider

__all__ = [
    "TokenService",
    "ResultCache",
    "HeliusTokenDataProvider",
    "JupiterTokenDataProvider",
    "BirdeyeTokenDataProvider",
    "SolscanTokenDataProvider",
    "CoinMarketCapTokenDataProvider",
    "CoinGeckoTokenDataProvider",
    "MockTokenDataProvider",
]
