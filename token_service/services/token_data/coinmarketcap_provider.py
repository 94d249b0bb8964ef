"""
CoinMarketCap token data provider.

CoinMarketCap quotes by ticker symbol, not by mint address, so only the
mints listed in MINT_SYMBOLS can be looked up. Any other mint fails
without a request being sent.
"""

import logging
from typing import Any

from token_service.core.exceptions import DataFetchError
from token_service.core.models import NATIVE_SOL_MINT, TokenInfo, TokenPrice
from token_service.core.protocols import Capability
from token_service.services.token_data.base import BaseHttpProvider, to_float

logger = logging.getLogger(__name__)

COINMARKETCAP_API_URL = "https://pro-api.coinmarketcap.com/v2"

# Mint -> CoinMarketCap symbol
MINT_SYMBOLS = {
    NATIVE_SOL_MINT: "SOL",
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v": "USDC",
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB": "USDT",
}


class CoinMarketCapTokenDataProvider(BaseHttpProvider):
    """
    Price and metadata for major tokens from CoinMarketCap.

    Quotes carry no on-chain decimals, so metadata reports 0 like every
    other source that lacks them.
    """

    name = "coinmarketcap"
    default_priority = 2
    default_base_url = COINMARKETCAP_API_URL
    capabilities = frozenset({Capability.TOKEN_PRICE, Capability.TOKEN_METADATA})

    def _default_headers(self) -> dict[str, str]:
        return {"X-CMC_PRO_API_KEY": self._config.api_key} if self._config.api_key else {}

    @staticmethod
    def _symbol_for(mint: str) -> str:
        symbol = MINT_SYMBOLS.get(mint)
        if symbol is None:
            raise DataFetchError(
                technical_message=f"coinmarketcap: no symbol mapping for {mint}"
            )
        return symbol

    async def _fetch_quote(self, operation: Capability, mint: str) -> dict[str, Any]:
        """Fetch the quote entry for a mapped mint."""
        symbol = self._symbol_for(mint)
        response = await self._executor.get(
            operation.value,
            "/cryptocurrency/quotes/latest",
            params={"symbol": symbol},
        )

        entry = ((response or {}).get("data") or {}).get(symbol)
        # v2 returns a list of matching coins per symbol
        if isinstance(entry, list):
            entry = entry[0] if entry else None
        if not isinstance(entry, dict):
            raise DataFetchError(
                technical_message=f"coinmarketcap: no quote for {symbol} ({mint})"
            )
        return entry

    @staticmethod
    def _usd_quote(entry: dict[str, Any]) -> dict[str, Any]:
        return (entry.get("quote") or {}).get("USD") or {}

    async def get_token_price(self, mint: str) -> TokenPrice:
        logger.debug(f"Fetching price from CoinMarketCap: {mint[:8]}...")
        entry = await self._fetch_quote(Capability.TOKEN_PRICE, mint)
        usd = self._usd_quote(entry)

        return self._build_price(
            mint,
            usd.get("price"),
            price_change_percentage_24h=to_float(usd.get("percent_change_24h")),
            volume_24h=to_float(usd.get("volume_24h")),
            market_cap=to_float(usd.get("market_cap")),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        logger.debug(f"Fetching metadata from CoinMarketCap: {mint[:8]}...")
        entry = await self._fetch_quote(Capability.TOKEN_METADATA, mint)
        usd = self._usd_quote(entry)

        return TokenInfo(
            mint=mint,
            name=entry.get("name") or "",
            symbol=entry.get("symbol") or MINT_SYMBOLS[mint],
            decimals=0,
            price_usd=to_float(usd.get("price")),
            price_change_percentage_24h=to_float(usd.get("percent_change_24h")),
        )
