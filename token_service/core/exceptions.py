"""
Custom exceptions for the token service.

Exception hierarchy:
    TokenServiceError (base)
    ├── AddressValidationError - Input is not a valid Solana address
    ├── ConfigurationError - No usable providers / bad settings
    ├── DataFetchError - A single provider could not deliver data
    │   ├── ApiRequestError - HTTP-level failure
    │   │   ├── TransportError - Network error, timeout or 5xx (retryable)
    │   │   ├── RateLimitError - HTTP 429
    │   │   ├── AuthenticationError - HTTP 401/403
    │   │   └── NotFoundError - HTTP 404
    │   └── CircuitOpenError - Provider's circuit breaker refused the call
    └── AggregateFailureError - Every provider in the fallback list failed

Each exception carries a user-friendly message that can be shown to users,
and optionally a technical message for logging.
"""

from dataclasses import dataclass


class TokenServiceError(Exception):
    """
    Base exception for all token service errors.

    Attributes:
        message: User-friendly error message (can be shown to users)
        technical_message: Detailed message for logs (optional)
    """

    def __init__(
        self,
        message: str = "Something went wrong. Please try again later.",
        technical_message: str | None = None,
    ):
        self.message = message
        self.technical_message = technical_message or message
        super().__init__(self.technical_message)

    def __str__(self) -> str:
        return self.technical_message


class AddressValidationError(TokenServiceError):
    """
    Raised when an address or mint is not a valid Solana public key.

    Raised before any network activity and never retried.
    """

    def __init__(
        self,
        message: str = "Invalid Solana address.",
        technical_message: str | None = None,
        field: str | None = None,
    ):
        self.field = field
        super().__init__(message, technical_message)


class ConfigurationError(TokenServiceError):
    """Raised when the service cannot be built from the given configuration."""

    def __init__(
        self,
        message: str = "Token service is not configured.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class DataFetchError(TokenServiceError):
    """
    Raised when a provider cannot deliver the requested data.

    Examples:
        - Price missing from an otherwise valid response
        - Capability not offered by the upstream API
        - Unexpected payload shape
    """

    def __init__(
        self,
        message: str = "Could not fetch token data. Please try again later.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class ApiRequestError(DataFetchError):
    """
    Raised when an upstream HTTP request fails.

    Attributes:
        endpoint: Request path that failed
        status_code: HTTP status, None when no response was received
    """

    def __init__(
        self,
        technical_message: str,
        endpoint: str,
        status_code: int | None = None,
        message: str = "Data provider request failed.",
    ):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(
            message,
            f"API request error ({endpoint}): {technical_message}",
        )


class TransportError(ApiRequestError):
    """Network failure, timeout or 5xx response. Retried by the executor."""

    def __init__(
        self,
        technical_message: str,
        endpoint: str,
        status_code: int | None = None,
    ):
        super().__init__(
            technical_message,
            endpoint,
            status_code,
            message="Data provider is temporarily unavailable.",
        )


class RateLimitError(ApiRequestError):
    """HTTP 429 from the provider."""

    def __init__(self, endpoint: str, retry_after: float | None = None):
        self.retry_after = retry_after
        super().__init__(
            "Rate limit exceeded",
            endpoint,
            429,
            message="Data provider rate limit reached. Please try again later.",
        )


class AuthenticationError(ApiRequestError):
    """HTTP 401/403 from the provider (bad or missing API key)."""

    def __init__(self, endpoint: str, status_code: int = 401):
        super().__init__(
            "Authentication failed",
            endpoint,
            status_code,
            message="Data provider rejected the API key.",
        )


class NotFoundError(ApiRequestError):
    """HTTP 404 from the provider."""

    def __init__(self, endpoint: str, resource: str = "Resource"):
        super().__init__(
            f"Resource not found: {resource}",
            endpoint,
            404,
            message="Token not found.",
        )


class CircuitOpenError(DataFetchError):
    """Raised when a provider's circuit breaker blocks the call."""

    def __init__(self, provider: str, retry_in: float | None = None):
        self.provider = provider
        self.retry_in = retry_in
        detail = f"Circuit breaker is open for {provider}"
        if retry_in is not None:
            detail += f" (retry in {retry_in:.1f}s)"
        super().__init__(
            message="Data provider is temporarily unavailable.",
            technical_message=detail,
        )


@dataclass(frozen=True)
class ProviderFailure:
    """One provider's failed turn inside the fallback loop."""

    provider: str
    kind: str
    message: str

    @classmethod
    def from_exception(cls, provider: str, exc: BaseException) -> "ProviderFailure":
        return cls(provider=provider, kind=type(exc).__name__, message=str(exc))

    def __str__(self) -> str:
        return f"{self.provider}: {self.message}"


class AggregateFailureError(TokenServiceError):
    """
    Raised when every provider in the fallback list failed.

    The per-provider failures are kept as structured records so callers
    can inspect them; the string form enumerates all of them.

    Attributes:
        operation: Operation name (e.g. "token-price")
        subject: Mint or wallet address the operation was for
        failures: ProviderFailure records in the order providers were tried
    """

    def __init__(
        self,
        operation: str,
        subject: str,
        failures: list[ProviderFailure],
        message: str = "Could not fetch token data from any provider.",
    ):
        self.operation = operation
        self.subject = subject
        self.failures = list(failures)
        details = (
            ", ".join(str(f) for f in self.failures)
            or "no configured provider supports this operation"
        )
        super().__init__(
            message,
            f"Failed to get {operation} for {subject}: {details}",
        )

    @property
    def providers(self) -> list[str]:
        """Names of the providers that were tried, in order."""
        return [f.provider for f in self.failures]
