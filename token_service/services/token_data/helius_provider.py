"""
Helius token data provider.

Fetches on-chain token data from the Helius DAS API and RPC.

Responsibilities:
1. Fetch asset metadata and price info via getAsset
2. Fetch wallet holdings via getAssetsByOwner
3. Fetch native SOL balance via getBalance
4. Normalize data into service models

NO aggregation, NO price enrichment (that's TokenService's job).
"""

import logging
from typing import Any

from token_service.core.exceptions import DataFetchError
from token_service.core.models import (
    ProviderConfig,
    TokenBalance,
    TokenInfo,
    TokenPrice,
    WalletPortfolio,
)
from token_service.core.protocols import Capability
from token_service.services.token_data.base import BaseHttpProvider, to_float
from token_service.services.token_data.cache import ResultCache
from token_service.utils.units import lamports_to_sol

logger = logging.getLogger(__name__)

# Helius API endpoint
HELIUS_RPC_URL = "https://mainnet.helius-rpc.com"

# Default lifetime of cached getAsset responses (seconds)
DEFAULT_ASSET_CACHE_TTL = 60.0

# getAssetsByOwner page size
ASSETS_PAGE_LIMIT = 1000


class HeliusTokenDataProvider(BaseHttpProvider):
    """
    TokenDataProvider backed by Helius.

    Uses:
    - getAsset (DAS API) for token metadata and price info
    - getAssetsByOwner (DAS API) for wallet balances
    - getBalance (RPC) for native SOL

    getAsset responses are cached for `cache_ttl` seconds because price
    and metadata lookups for the same mint hit the same call.
    """

    name = "helius"
    default_priority = 1
    default_base_url = HELIUS_RPC_URL
    capabilities = frozenset(
        {
            Capability.TOKEN_PRICE,
            Capability.TOKEN_METADATA,
            Capability.TOKEN_BALANCES,
            Capability.WALLET_PORTFOLIO,
        }
    )

    def __init__(self, config: ProviderConfig, **kwargs: Any):
        super().__init__(config, **kwargs)
        self._rpc_path = f"/?api-key={config.api_key}"
        self._asset_cache = ResultCache()
        self._asset_cache_ttl = (
            config.cache_ttl if config.cache_ttl is not None else DEFAULT_ASSET_CACHE_TTL
        )

    def _default_headers(self) -> dict[str, str]:
        # The API key travels in the query string
        return {}

    async def _rpc(self, operation: Capability, method: str, params: Any) -> Any:
        """Call a JSON-RPC method and return its `result`."""
        payload = {
            "jsonrpc": "2.0",
            "id": "1",
            "method": method,
            "params": params,
        }
        data = await self._executor.post(operation.value, self._rpc_path, json=payload)

        if not isinstance(data, dict):
            raise DataFetchError(technical_message=f"helius: {method} returned no data")

        if "error" in data:
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise DataFetchError(technical_message=f"helius: {method} error: {message}")

        return data.get("result")

    async def _get_asset(self, operation: Capability, mint: str) -> dict:
        cache_key = f"asset:{mint}"
        cached = self._asset_cache.get(cache_key)
        if cached is not None:
            return cached

        asset = await self._rpc(
            operation,
            "getAsset",
            {"id": mint, "options": {"showFungible": True}},
        )
        if not asset or not asset.get("content"):
            raise DataFetchError(
                technical_message=f"helius: asset data not available for {mint}"
            )

        self._asset_cache.set(cache_key, asset, self._asset_cache_ttl)
        return asset

    async def get_token_price(self, mint: str) -> TokenPrice:
        logger.debug(f"Fetching price from Helius: {mint[:8]}...")
        asset = await self._get_asset(Capability.TOKEN_PRICE, mint)

        price_info = (asset.get("token_info") or {}).get("price_info") or {}
        if not price_info.get("price_per_token"):
            raise DataFetchError(
                technical_message=f"helius: price data not available for {mint} in DAS API"
            )

        return self._build_price(
            mint,
            price_info["price_per_token"],
            price_change_percentage_24h=to_float(
                price_info.get("price_change_percentage_24h")
            ),
        )

    async def get_token_metadata(self, mint: str) -> TokenInfo:
        logger.debug(f"Fetching metadata from Helius: {mint[:8]}...")
        asset = await self._get_asset(Capability.TOKEN_METADATA, mint)
        return self._build_token_info(asset, fallback_mint=mint)

    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        logger.debug(f"Fetching balances from Helius: {address[:8]}...")
        result = await self._rpc(
            Capability.TOKEN_BALANCES,
            "getAssetsByOwner",
            {
                "ownerAddress": address,
                "page": 1,
                "limit": ASSETS_PAGE_LIMIT,
                "displayOptions": {"showFungible": True},
            },
        )
        if not result or "items" not in result:
            raise DataFetchError(
                technical_message=f"helius: asset data not available for wallet {address}"
            )

        balances = []
        for item in result["items"]:
            balance = self._build_balance(item)
            if balance is not None:
                balances.append(balance)

        logger.debug(f"Helius returned {len(balances)} balances for {address[:8]}")
        return balances

    async def get_wallet_portfolio(self, address: str) -> WalletPortfolio:
        logger.debug(f"Fetching portfolio from Helius: {address[:8]}...")
        tokens = await self.get_token_balances(address)
        result = await self._rpc(Capability.WALLET_PORTFOLIO, "getBalance", [address])

        lamports = (result or {}).get("value")
        if lamports is None:
            raise DataFetchError(
                technical_message=f"helius: SOL balance not available for {address}"
            )

        return WalletPortfolio(
            address=address,
            sol_balance=lamports_to_sol(lamports),
            tokens=tokens,
        )

    def _build_token_info(self, asset: dict, fallback_mint: str) -> TokenInfo:
        """Build TokenInfo from a DAS asset."""
        content = asset.get("content") or {}
        metadata = content.get("metadata") or {}
        links = content.get("links") or {}
        token_info = asset.get("token_info") or {}
        price_info = token_info.get("price_info") or {}

        return TokenInfo(
            mint=asset.get("id") or fallback_mint,
            name=metadata.get("name") or "",
            symbol=metadata.get("symbol") or token_info.get("symbol") or "",
            decimals=int(token_info.get("decimals") or 0),
            logo_url=links.get("image") or None,
            price_usd=to_float(price_info.get("price_per_token")),
        )

    def _build_balance(self, item: dict) -> TokenBalance | None:
        """
        Build a TokenBalance from a getAssetsByOwner item.

        Items without fungible token info (NFTs) or without decimals are
        skipped: a guessed decimals value would corrupt the UI amount.
        """
        token_info = item.get("token_info")
        if not token_info or token_info.get("decimals") is None:
            return None

        mint = item.get("id")
        if not mint:
            return None

        return TokenBalance(
            mint=mint,
            raw_amount=str(int(token_info.get("balance") or 0)),
            decimals=int(token_info["decimals"]),
            token_info=self._build_token_info(item, fallback_mint=mint),
        )
