"""
Birdeye token data provider.

Uses the public Birdeye API:
- GET /defi/price for the current price
- GET /defi/token_overview for metadata
"""

import logging
from typing import Any

from token_service.core.exceptions import DataFetchError
from token_service.core.models import TokenInfo, TokenPrice
from token_service.core.protocols import Capability
from token_service.services.token_data.base import BaseHttpProvider, to_float

logger = logging.getLogger(__name__)

BIRDEYE_API_URL = "https://public-api.birdeye.so"


class BirdeyeTokenDataProvider(BaseHttpProvider):
    """Price and metadata from Birdeye."""

    name = "birdeye"
    default_priority = 3
    default_base_url = BIRDEYE_API_URL

    def _default_headers(self) -> dict[str, str]:
        return {"X-API-KEY": self._config.api_key, "x-chain": "solana"}

    def _unwrap(self, response: Any, mint: str, what: str) -> dict:
        if not isinstance(response, dict) or not response.get("success"):
            raise DataFetchError(
                technical_message=f"birdeye: {what} not available for {mint}"
            )
        data = response.get("data")
        if not isinstance(data, dict):
            raise DataFetchError(
                technical_message=f"birdeye: {what} not available for {mint}"
            )
        return data

    async def get_token_price(self, mint: str) -> TokenPrice:
        logger.debug(f"Fetching price from Birdeye: {mint[:8]}...")
        response = await self._executor.get(
            Capability.TOKEN_PRICE.value, "/defi/price", params={"address": mint}
        )
        data = self._unwrap(response, mint, "price data")

        return self._build_price(
            mint,
            data.get("value"),
            price_change_percentage_24h=to_float(data.get("priceChange24h")),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        logger.debug(f"Fetching metadata from Birdeye: {mint[:8]}...")
        response = await self._executor.get(
            Capability.TOKEN_METADATA.value,
            "/defi/token_overview",
            params={"address": mint},
        )
        data = self._unwrap(response, mint, "token metadata")

        return TokenInfo(
            mint=mint,
            name=data.get("name") or "",
            symbol=data.get("symbol") or "",
            decimals=int(data.get("decimals") or 0),
            logo_url=data.get("logoURI"),
            price_usd=to_float(data.get("price")),
            price_change_percentage_24h=to_float(data.get("priceChange24hPercent")),
        )
