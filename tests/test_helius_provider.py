"""
Tests for HeliusTokenDataProvider.

Tests cover:
- Successful API responses
- Partial data handling
- Balance and portfolio parsing
- Error handling
"""

import pytest
from aioresponses import aioresponses

from token_service.core.exceptions import DataFetchError, TransportError
from token_service.core.models import ProviderConfig
from token_service.core.protocols import Capability
from token_service.services.token_data.helius_provider import (
    HELIUS_RPC_URL,
    HeliusTokenDataProvider,
)

RPC_URL = f"{HELIUS_RPC_URL}/?api-key=test-api-key"
MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


@pytest.fixture
def helius_provider() -> HeliusTokenDataProvider:
    """HeliusTokenDataProvider with test API key."""
    return HeliusTokenDataProvider(
        ProviderConfig(api_key="test-api-key", timeout=1.0, max_retries=0),
        retry_backoff=0,
    )


@pytest.fixture
def mock_asset_response() -> dict:
    """Mock getAsset response."""
    return {
        "jsonrpc": "2.0",
        "id": "1",
        "result": {
            "id": MINT,
            "content": {
                "metadata": {
                    "name": "Bonk",
                    "symbol": "Bonk",
                },
                "links": {"image": "https://arweave.net/bonk.png"},
            },
            "token_info": {
                "symbol": "Bonk",
                "supply": 8881594973561640000,
                "decimals": 5,
                "price_info": {
                    "price_per_token": 0.0000215,
                    "currency": "USDC",
                },
            },
        },
    }


@pytest.fixture
def mock_assets_by_owner_response() -> dict:
    """Mock getAssetsByOwner response with a fungible token and an NFT."""
    return {
        "jsonrpc": "2.0",
        "id": "1",
        "result": {
            "total": 2,
            "items": [
                {
                    "id": MINT,
                    "interface": "FungibleToken",
                    "content": {"metadata": {"name": "Bonk", "symbol": "Bonk"}},
                    "token_info": {"balance": 150000000, "decimals": 5},
                },
                {
                    "id": "NftMint111111111111111111111111111111111111",
                    "interface": "V1_NFT",
                    "content": {"metadata": {"name": "Some NFT"}},
                },
            ],
        },
    }


class TestHeliusProviderSuccess:
    """Tests for successful API responses."""

    @pytest.mark.asyncio
    async def test_get_token_price(
        self, helius_provider: HeliusTokenDataProvider, mock_asset_response: dict
    ) -> None:
        """Should parse the DAS price info."""
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_asset_response)

            result = await helius_provider.get_token_price(MINT)

        assert result.mint == MINT
        assert result.price_usd == 0.0000215
        assert result.provider == "helius"
        assert result.fetched_at_ms > 0

    @pytest.mark.asyncio
    async def test_get_token_metadata(
        self, helius_provider: HeliusTokenDataProvider, mock_asset_response: dict
    ) -> None:
        """Should fetch and parse token metadata correctly."""
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_asset_response)

            result = await helius_provider.get_token_metadata(MINT)

        assert result.name == "Bonk"
        assert result.symbol == "Bonk"
        assert result.decimals == 5
        assert result.logo_url == "https://arweave.net/bonk.png"

    @pytest.mark.asyncio
    async def test_asset_response_reused(
        self, helius_provider: HeliusTokenDataProvider, mock_asset_response: dict
    ) -> None:
        """Price and metadata for the same mint share one getAsset call."""
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_asset_response)

            await helius_provider.get_token_price(MINT)
            await helius_provider.get_token_metadata(MINT)

            assert sum(len(calls) for calls in m.requests.values()) == 1

    @pytest.mark.asyncio
    async def test_sends_json_rpc_payload(
        self, helius_provider: HeliusTokenDataProvider, mock_asset_response: dict
    ) -> None:
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_asset_response)

            await helius_provider.get_token_metadata(MINT)

            call = next(iter(m.requests.values()))[0]

        assert call.kwargs["json"]["method"] == "getAsset"
        assert call.kwargs["json"]["params"]["id"] == MINT

    @pytest.mark.asyncio
    async def test_get_token_balances(
        self,
        helius_provider: HeliusTokenDataProvider,
        mock_assets_by_owner_response: dict,
    ) -> None:
        """Fungible tokens become balances, NFTs are skipped."""
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_assets_by_owner_response)

            result = await helius_provider.get_token_balances(WALLET)

        assert len(result) == 1
        balance = result[0]
        assert balance.mint == MINT
        assert balance.raw_amount == "150000000"
        assert balance.ui_amount == 1500.0
        assert balance.token_info.symbol == "Bonk"

    @pytest.mark.asyncio
    async def test_get_wallet_portfolio(
        self,
        helius_provider: HeliusTokenDataProvider,
        mock_assets_by_owner_response: dict,
    ) -> None:
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_assets_by_owner_response)
            m.post(
                RPC_URL,
                payload={"jsonrpc": "2.0", "id": "1", "result": {"value": 2_500_000_000}},
            )

            result = await helius_provider.get_wallet_portfolio(WALLET)

        assert result.address == WALLET
        assert result.sol_balance == 2.5
        assert len(result.tokens) == 1
        assert result.total_value_usd is None

    def test_advertises_all_capabilities(
        self, helius_provider: HeliusTokenDataProvider
    ) -> None:
        assert helius_provider.capabilities == frozenset(Capability)
        assert helius_provider.priority == 1


class TestHeliusProviderPartialData:
    """Tests for incomplete responses."""

    @pytest.mark.asyncio
    async def test_missing_price_info(
        self, helius_provider: HeliusTokenDataProvider, mock_asset_response: dict
    ) -> None:
        del mock_asset_response["result"]["token_info"]["price_info"]

        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_asset_response)

            with pytest.raises(DataFetchError) as exc_info:
                await helius_provider.get_token_price(MINT)

        assert "price data not available" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_decimals_default_to_zero(
        self, helius_provider: HeliusTokenDataProvider, mock_asset_response: dict
    ) -> None:
        del mock_asset_response["result"]["token_info"]["decimals"]

        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_asset_response)

            result = await helius_provider.get_token_metadata(MINT)

        assert result.decimals == 0

    @pytest.mark.asyncio
    async def test_balance_without_decimals_skipped(
        self,
        helius_provider: HeliusTokenDataProvider,
        mock_assets_by_owner_response: dict,
    ) -> None:
        del mock_assets_by_owner_response["result"]["items"][0]["token_info"]["decimals"]

        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_assets_by_owner_response)

            result = await helius_provider.get_token_balances(WALLET)

        assert result == []


class TestHeliusProviderErrors:
    """Tests for error handling."""

    @pytest.mark.asyncio
    async def test_rpc_error(self, helius_provider: HeliusTokenDataProvider) -> None:
        """JSON-RPC error object should raise DataFetchError."""
        with aioresponses() as m:
            m.post(
                RPC_URL,
                payload={
                    "jsonrpc": "2.0",
                    "id": "1",
                    "error": {"code": -32000, "message": "Asset not found"},
                },
            )

            with pytest.raises(DataFetchError) as exc_info:
                await helius_provider.get_token_metadata(MINT)

        assert "Asset not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_result(self, helius_provider: HeliusTokenDataProvider) -> None:
        with aioresponses() as m:
            m.post(RPC_URL, payload={"jsonrpc": "2.0", "id": "1", "result": None})

            with pytest.raises(DataFetchError):
                await helius_provider.get_token_metadata(MINT)

    @pytest.mark.asyncio
    async def test_server_error(self, helius_provider: HeliusTokenDataProvider) -> None:
        with aioresponses() as m:
            m.post(RPC_URL, status=500)

            with pytest.raises(TransportError):
                await helius_provider.get_token_price(MINT)

    @pytest.mark.asyncio
    async def test_missing_sol_balance(
        self,
        helius_provider: HeliusTokenDataProvider,
        mock_assets_by_owner_response: dict,
    ) -> None:
        with aioresponses() as m:
            m.post(RPC_URL, payload=mock_assets_by_owner_response)
            m.post(RPC_URL, payload={"jsonrpc": "2.0", "id": "1", "result": {}})

            with pytest.raises(DataFetchError):
                await helius_provider.get_wallet_portfolio(WALLET)
