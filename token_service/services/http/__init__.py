"""Resilient HTTP access shared by the provider adapters."""

from token_service.services.http.circuit_breaker import (
    BreakerStatus,
    CircuitBreaker,
    CircuitState,
)
from token_service.services.http.executor import RequestExecutor

__all__ = ["BreakerStatus", "CircuitBreaker", "CircuitState", "RequestExecutor"]
