"""Solscan token data provider (public API v1)."""

import logging

from token_service.core.exceptions import DataFetchError
from token_service.core.models import TokenInfo, TokenPrice
from token_service.core.protocols import Capability
from token_service.services.token_data.base import BaseHttpProvider, to_float

logger = logging.getLogger(__name__)

SOLSCAN_API_URL = "https://public-api.solscan.io"


class SolscanTokenDataProvider(BaseHttpProvider):
    """Price and metadata from Solscan."""

    name = "solscan"
    default_priority = 4
    default_base_url = SOLSCAN_API_URL

    def _default_headers(self) -> dict[str, str]:
        return {"token": self._config.api_key} if self._config.api_key else {}

    async def get_token_price(self, mint: str) -> TokenPrice:
        logger.debug(f"Fetching price from Solscan: {mint[:8]}...")
        response = await self._executor.get(
            Capability.TOKEN_PRICE.value, f"/market/token/{mint}"
        )
        if not isinstance(response, dict) or not response.get("priceUsdt"):
            raise DataFetchError(
                technical_message=f"solscan: price data not available for {mint}"
            )

        return self._build_price(
            mint,
            response["priceUsdt"],
            price_change_percentage_24h=to_float(response.get("priceChange24h")),
            volume_24h=to_float(response.get("volumeUsdt")),
            market_cap=to_float(response.get("marketCapFD")),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        logger.debug(f"Fetching metadata from Solscan: {mint[:8]}...")
        response = await self._executor.get(
            Capability.TOKEN_METADATA.value,
            "/token/meta",
            params={"tokenAddress": mint},
        )
        if not isinstance(response, dict) or not response.get("symbol"):
            raise DataFetchError(
                technical_message=f"solscan: token metadata not available for {mint}"
            )

        return TokenInfo(
            mint=mint,
            name=response.get("name") or "",
            symbol=response["symbol"],
            decimals=int(response.get("decimals") or 0),
            logo_url=response.get("icon"),
            price_usd=to_float(response.get("price")),
        )
