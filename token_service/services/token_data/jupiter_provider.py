"""
Jupiter price provider.

Jupiter only serves prices; metadata is not offered, so the provider
does not advertise the metadata capability.
"""

import logging

from token_service.core.exceptions import DataFetchError
from token_service.core.models import TokenInfo, TokenPrice
from token_service.core.protocols import Capability
from token_service.services.token_data.base import BaseHttpProvider, to_float

logger = logging.getLogger(__name__)

JUPITER_PRICE_URL = "https://price.jup.ag/v4"


class JupiterTokenDataProvider(BaseHttpProvider):
    """Price data from the Jupiter price API (`GET /price?ids=<mint>`)."""

    name = "jupiter"
    default_priority = 2
    default_base_url = JUPITER_PRICE_URL
    capabilities = frozenset({Capability.TOKEN_PRICE})

    async def get_token_price(self, mint: str) -> TokenPrice:
        logger.debug(f"Fetching price from Jupiter: {mint[:8]}...")
        response = await self._executor.get(
            Capability.TOKEN_PRICE.value, "/price", params={"ids": mint}
        )

        data = (response or {}).get("data") or {}
        price_data = data.get(mint)
        if not price_data:
            raise DataFetchError(
                technical_message=f"jupiter: price data not available for {mint}"
            )

        return self._build_price(
            mint,
            price_data.get("price"),
            price_change_percentage_24h=to_float(
                price_data.get("price_24h_change_percentage")
            ),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        raise DataFetchError(
            technical_message="jupiter: token metadata not available from Jupiter"
        )
