"""
Services module - business logic layer.

Contains the token data services and the ServiceFactory that wires
them from application settings.
"""

from token_service.services.factory import ServiceFactory
from token_service.services.token_data.aggregator import TokenService

__all__ = ["ServiceFactory", "TokenService"]
