"""
CoinGecko token data provider.

Looks tokens up by their Solana contract address
(`GET /coins/solana/contract/{mint}`), which returns market data and
metadata in one payload.
"""

import logging
from typing import Any

from token_service.core.exceptions import DataFetchError
from token_service.core.models import TokenInfo, TokenPrice
from token_service.core.protocols import Capability
from token_service.services.token_data.base import BaseHttpProvider, to_float

logger = logging.getLogger(__name__)

COINGECKO_API_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoTokenDataProvider(BaseHttpProvider):
    """
    Price and metadata from CoinGecko.

    Low default priority: broad coverage but tight rate limits on the
    free tier, so it serves as the last fallback.
    """

    name = "coingecko"
    default_priority = 6
    default_base_url = COINGECKO_API_URL

    def _default_headers(self) -> dict[str, str]:
        return {"x-cg-pro-api-key": self._config.api_key} if self._config.api_key else {}

    async def _fetch_contract(self, operation: Capability, mint: str) -> dict[str, Any]:
        response = await self._executor.get(
            operation.value, f"/coins/solana/contract/{mint}"
        )
        if not isinstance(response, dict) or not response:
            raise DataFetchError(
                technical_message=f"coingecko: token data not available for {mint}"
            )
        return response

    async def get_token_price(self, mint: str) -> TokenPrice:
        logger.debug(f"Fetching price from CoinGecko: {mint[:8]}...")
        response = await self._fetch_contract(Capability.TOKEN_PRICE, mint)

        market_data = response.get("market_data") or {}
        current_price = (market_data.get("current_price") or {}).get("usd")

        return self._build_price(
            mint,
            current_price,
            price_change_percentage_24h=to_float(
                market_data.get("price_change_percentage_24h")
            ),
            volume_24h=to_float((market_data.get("total_volume") or {}).get("usd")),
            market_cap=to_float((market_data.get("market_cap") or {}).get("usd")),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        logger.debug(f"Fetching metadata from CoinGecko: {mint[:8]}...")
        response = await self._fetch_contract(Capability.TOKEN_METADATA, mint)

        platform = (response.get("detail_platforms") or {}).get("solana") or {}
        market_data = response.get("market_data") or {}

        return TokenInfo(
            mint=mint,
            name=response.get("name") or "",
            symbol=(response.get("symbol") or "").upper(),
            decimals=int(platform.get("decimal_place") or 0),
            logo_url=(response.get("image") or {}).get("large"),
            price_usd=to_float((market_data.get("current_price") or {}).get("usd")),
            price_change_percentage_24h=to_float(
                market_data.get("price_change_percentage_24h")
            ),
        )
