"""
Pydantic models for the token service.

All data structures returned by providers and by TokenService are
defined here. Models are frozen: a result is never mutated after it
is built, later fetches produce new instances instead.
"""

from typing import Any

from pydantic import BaseModel, Field, computed_field

from token_service.utils.units import raw_to_ui_amount, ui_to_raw_amount

# Wrapped/native SOL mint
NATIVE_SOL_MINT = "So11111111111111111111111111111111111111112"

# Provider blocks a TokenServiceConfig can carry, in configuration order
PROVIDER_NAMES = ("helius", "jupiter", "birdeye", "solscan", "coinmarketcap", "coingecko")


class ProviderConfig(BaseModel):
    """
    Configuration for a single provider adapter.

    Durations are in seconds. Fields left as None fall back to the
    adapter's own defaults.
    """

    api_key: str
    """API key passed through to the provider"""

    base_url: str | None = None
    """Override of the provider's default endpoint"""

    timeout: float | None = Field(default=None, gt=0)
    """Per-request timeout in seconds"""

    max_retries: int | None = Field(default=None, ge=0)
    """Retries after the first attempt (transport errors only)"""

    priority: int | None = None
    """Fallback rank, lower is tried first"""

    cache_ttl: float | None = Field(default=None, ge=0)
    """Provider-side response cache TTL in seconds"""

    model_config = {"frozen": True}


class TokenServiceConfig(BaseModel):
    """
    TokenService configuration.

    A provider is instantiated only when its block is present.
    """

    helius: ProviderConfig | None = None
    jupiter: ProviderConfig | None = None
    birdeye: ProviderConfig | None = None
    solscan: ProviderConfig | None = None
    coinmarketcap: ProviderConfig | None = None
    coingecko: ProviderConfig | None = None

    price_cache_ttl: float = Field(default=60.0, ge=0)
    """TTL in seconds for prices and merged token data"""

    cache_ttl: float = Field(default=300.0, ge=0)
    """TTL in seconds for metadata, balances and portfolios"""

    circuit_failure_threshold: int = Field(default=5, gt=0)
    circuit_reset_timeout: float = Field(default=30.0, ge=0)

    retry_backoff: float = Field(default=0.5, ge=0)
    """Base delay in seconds for exponential retry backoff"""

    model_config = {"frozen": True, "extra": "forbid"}

    def provider_blocks(self) -> dict[str, ProviderConfig]:
        """Configured provider blocks keyed by provider name."""
        blocks = {name: getattr(self, name) for name in PROVIDER_NAMES}
        return {name: block for name, block in blocks.items() if block is not None}


class TokenPrice(BaseModel):
    """Price quote for a token from one provider."""

    mint: str
    """Token mint address"""

    price_usd: float = Field(ge=0)
    """Price in USD"""

    price_change_percentage_24h: float | None = None
    """24h price change in percent"""

    volume_24h: float | None = None
    """24h trading volume in USD"""

    market_cap: float | None = None
    """Market capitalization in USD"""

    provider: str
    """Name of the provider that supplied the quote"""

    fetched_at_ms: int
    """Epoch milliseconds when the quote was fetched"""

    model_config = {"frozen": True}


class TokenInfo(BaseModel):
    """
    Token metadata, optionally merged with price data.

    decimals defaults to 0 when a provider cannot supply it. Amounts
    scaled with a defaulted 0 are wrong for most tokens, so adapters
    that know the real value must always set it.
    """

    mint: str
    symbol: str = ""
    name: str = ""
    decimals: int = Field(default=0, ge=0)
    logo_url: str | None = None
    price_usd: float | None = None
    price_change_percentage_24h: float | None = None

    model_config = {"frozen": True}


class TokenBalance(BaseModel):
    """
    A wallet's holding of one token.

    ui_amount is always derived from raw_amount and decimals, so the
    two cannot drift apart.
    """

    mint: str
    raw_amount: str = Field(pattern=r"^\d+$")
    """Raw on-chain amount as a decimal string"""

    decimals: int = Field(default=0, ge=0)

    token_info: TokenInfo | None = None

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ui_amount(self) -> float:
        """Amount scaled by decimals for display."""
        return raw_to_ui_amount(self.raw_amount, self.decimals)

    @classmethod
    def from_ui_amount(
        cls,
        mint: str,
        ui_amount: float,
        decimals: int,
        token_info: TokenInfo | None = None,
    ) -> "TokenBalance":
        """Build a balance from a UI amount."""
        return cls(
            mint=mint,
            raw_amount=ui_to_raw_amount(ui_amount, decimals),
            decimals=decimals,
            token_info=token_info,
        )


class WalletPortfolio(BaseModel):
    """
    A wallet's SOL balance and token holdings.

    total_value_usd is computed by TokenService's price enrichment,
    never taken from a provider.
    """

    address: str
    sol_balance: float = Field(default=0.0, ge=0)
    """SOL balance in SOL (0 when unknown)"""

    tokens: list[TokenBalance] = Field(default_factory=list)

    total_value_usd: float | None = None

    model_config = {"frozen": True}


def merge_price(info: TokenInfo, price: TokenPrice | None) -> TokenInfo:
    """Return a copy of info carrying the quote's price fields."""
    update: dict[str, Any] = {
        "price_usd": price.price_usd if price else None,
        "price_change_percentage_24h": (
            price.price_change_percentage_24h if price else None
        ),
    }
    return info.model_copy(update=update)
