"""
Service factory for dependency injection.

Creates and configures the token service from application settings.
Switches between mock and real providers automatically.

This is the single point of service creation - the entry point and
any embedding application should create services through this factory.
"""

import logging

from token_service.config.settings import Settings
from token_service.core.exceptions import ConfigurationError
from token_service.core.models import TokenServiceConfig
from token_service.core.protocols import TokenDataProvider
from token_service.services.token_data.aggregator import TokenService
from token_service.services.token_data.mock_provider import MockTokenDataProvider

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating application services.

    Reads configuration and creates appropriate implementations:
    - Mock provider for development (USE_MOCK_SERVICES=true)
    - Real provider adapters for production (USE_MOCK_SERVICES=false)

    Usage:
        factory = ServiceFactory(settings)
        service = factory.create_token_service()
    """

    def __init__(self, settings: Settings):
        """
        Initialize factory with application settings.

        Args:
            settings: Application configuration
        """
        self._settings = settings
        self._log_mode()

    def _log_mode(self) -> None:
        """Log the current mode for debugging."""
        mode = "MOCK" if self._settings.use_mock_services else "PRODUCTION"
        logger.info(f"ServiceFactory initialized in {mode} mode")

    def validate(self) -> None:
        """
        Check that real mode has at least one provider to talk to.

        Raises:
            ConfigurationError: If no provider is enabled in production mode
        """
        if self._settings.use_mock_services:
            return  # Mock mode doesn't need real API keys

        if not self._settings.enabled_providers:
            raise ConfigurationError(
                message="No token data provider is configured.",
                technical_message=(
                    "No provider API keys set for production mode. "
                    "Set HELIUS_API_KEY (or another provider key), JUPITER_ENABLED=true, "
                    "or USE_MOCK_SERVICES=true for development without API keys."
                ),
            )

    def create_service_config(self) -> TokenServiceConfig:
        """
        Build the TokenService configuration.

        In mock mode no provider block is emitted; the mock provider is
        injected instead.
        """
        settings = self._settings
        blocks = {}
        if not settings.use_mock_services:
            blocks = {
                name: settings.provider_config(name)
                for name in settings.enabled_providers
            }

        return TokenServiceConfig(
            **blocks,
            price_cache_ttl=settings.price_cache_ttl_seconds,
            cache_ttl=settings.cache_ttl_seconds,
            circuit_failure_threshold=settings.circuit_failure_threshold,
            circuit_reset_timeout=settings.circuit_reset_timeout_seconds,
        )

    def create_extra_providers(self) -> list[TokenDataProvider]:
        if self._settings.use_mock_services:
            logger.debug("Creating MockTokenDataProvider")
            return [MockTokenDataProvider()]
        return []

    def create_token_service(self) -> TokenService:
        """
        Create the token service.

        This is the primary service used by the entry point.

        Returns:
            TokenService ready for use

        Raises:
            ConfigurationError: If no provider can be configured
        """
        self.validate()
        logger.info("Creating TokenService")
        return TokenService(
            self.create_service_config(),
            providers=self.create_extra_providers(),
        )
