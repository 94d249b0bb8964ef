"""
Application settings loaded from environment variables.

Uses pydantic-settings for automatic loading from .env file.
All settings have sensible defaults for development mode.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from token_service.core.models import PROVIDER_NAMES, ProviderConfig


class Settings(BaseSettings):
    """
    Application configuration.

    All values are loaded from environment variables.
    Copy .env.example to .env and fill in your values.

    A provider is configured when its API key is set. Jupiter's public
    price API needs no key, so it is switched on with JUPITER_ENABLED.

    Attributes:
        environment: Runtime environment (development/production)
        use_mock_services: Use the offline mock provider instead of real APIs
        log_level: Logging verbosity
        api_timeout_seconds: Timeout for external API calls
        api_max_retries: Retries after the first attempt on transport errors
        price_cache_ttl_seconds: Lifetime of cached prices
        cache_ttl_seconds: Lifetime of cached metadata, balances, portfolios
        circuit_failure_threshold: Consecutive failures that open a circuit
        circuit_reset_timeout_seconds: Wait before a half-open trial request
    """

    # Environment
    environment: Literal["development", "production"] = "development"
    use_mock_services: bool = True

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # HTTP
    api_timeout_seconds: float = Field(default=10.0, gt=0)
    api_max_retries: int = Field(default=3, ge=0)

    # Cache
    price_cache_ttl_seconds: float = Field(default=60.0, ge=0)
    cache_ttl_seconds: float = Field(default=300.0, ge=0)

    # Circuit breaker
    circuit_failure_threshold: int = Field(default=5, gt=0)
    circuit_reset_timeout_seconds: float = Field(default=30.0, ge=0)

    # Providers (API keys optional when use_mock_services=True)
    helius_api_key: str = ""
    helius_base_url: str | None = None
    helius_priority: int | None = None

    jupiter_enabled: bool = False
    jupiter_api_key: str = ""
    jupiter_base_url: str | None = None
    jupiter_priority: int | None = None

    birdeye_api_key: str = ""
    birdeye_base_url: str | None = None
    birdeye_priority: int | None = None

    solscan_api_key: str = ""
    solscan_base_url: str | None = None
    solscan_priority: int | None = None

    coinmarketcap_api_key: str = ""
    coinmarketcap_base_url: str | None = None
    coinmarketcap_priority: int | None = None

    coingecko_api_key: str = ""
    coingecko_base_url: str | None = None
    coingecko_priority: int | None = None

    # Pydantic settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Case-insensitive env var names
        case_sensitive=False,
        # Don't fail if .env doesn't exist
        env_ignore_empty=True,
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def is_provider_enabled(self, name: str) -> bool:
        if name == "jupiter" and self.jupiter_enabled:
            return True
        return bool(getattr(self, f"{name}_api_key"))

    def provider_config(self, name: str) -> ProviderConfig:
        """Build the adapter config for one provider from its settings."""
        return ProviderConfig(
            api_key=getattr(self, f"{name}_api_key"),
            base_url=getattr(self, f"{name}_base_url"),
            priority=getattr(self, f"{name}_priority"),
            timeout=self.api_timeout_seconds,
            max_retries=self.api_max_retries,
        )

    @property
    def enabled_providers(self) -> list[str]:
        return [name for name in PROVIDER_NAMES if self.is_provider_enabled(name)]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to avoid re-reading .env file on every call.
    Settings are loaded once and reused throughout the application.

    Returns:
        Settings instance with all configuration values.
    """
    return Settings()
