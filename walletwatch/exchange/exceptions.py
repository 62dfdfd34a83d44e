"""
Exchange-related exception classes.

Two families live here:
- APIError and its subclasses for local failures (the request could not be
  built or the answer could not be read). These carry no exchange context.
- APIDomainError and its subclasses, the single taxonomy surfaced for every
  failure reported by the exchange or the network. Each carries an
  APIErrorContext for diagnostics.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type


class ExchangeError(Exception):
    """Base exception for all exchange-related errors."""
    pass


class TransportError(ExchangeError):
    """Exception raised when the HTTP transport fails before a response."""
    pass


class CredentialsNotFoundError(ExchangeError):
    """Exception raised when no credentials are stored for an account."""

    def __init__(self, account: str):
        self.account = account
        super().__init__(f"No credentials found for account: {account}")


# ============================================================================
# LOCAL FAILURES
# ============================================================================

class APIError(ExchangeError):
    """Base exception for failures that happen on our side of the exchange."""

    description = "API error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.description)


class InvalidRequestError(APIError):
    """Exception raised when a signed request cannot be built."""

    description = "Invalid API request"


class NoDataError(APIError):
    """Exception raised when the exchange answered with an empty body."""

    description = "No data received from API"


class ParseError(APIError):
    """Exception raised when a successful body cannot be read as a wallet."""

    description = "Failed to parse API response"


# ============================================================================
# DOMAIN FAILURES
# ============================================================================

class DomainErrorKind(Enum):
    """High-level API error taxonomy for user-facing messaging."""
    INVALID_CREDENTIALS = "invalidCredentials"
    PERMISSION_DENIED = "permissionDenied"
    IP_NOT_ALLOWED = "ipNotAllowed"
    KEY_REVOKED_OR_INACTIVE = "keyRevokedOrInactive"
    SIGNATURE_INVALID = "signatureInvalid"
    TIMESTAMP_OUT_OF_RANGE = "timestampOutOfRange"
    MISSING_OR_INVALID_PARAMS = "missingOrInvalidParams"
    RATE_LIMITED = "rateLimited"
    MAINTENANCE = "maintenance"
    SERVER = "server"
    NETWORK = "network"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class APIErrorContext:
    """
    Diagnostic metadata attached to every domain error.

    Never holds secrets: only the selector, the HTTP status, the raw
    exchange code and message, the request id and the endpoint.
    """
    exchange: Any                    # ExchangeSelector
    http_status: Optional[int] = None
    api_code: Optional[str] = None
    request_id: Optional[str] = None
    endpoint: Optional[str] = None
    raw_message: Optional[str] = None


class APIDomainError(ExchangeError):
    """
    Base exception for failures reported by an exchange or the network.

    Subclasses only differ by `kind`. Two domain errors are equal when both
    the kind and the context are equal.
    """

    kind: DomainErrorKind = DomainErrorKind.UNKNOWN

    def __init__(self, context: APIErrorContext):
        self.context = context
        super().__init__(self.user_message)

    @property
    def message_key(self) -> str:
        """Localizable message key, e.g. "api.rateLimited.message"."""
        return f"api.{self.kind.value}.message"

    @property
    def http_status(self) -> Optional[int]:
        return self.context.http_status

    @property
    def api_code(self) -> Optional[str]:
        return self.context.api_code

    @property
    def user_message(self) -> str:
        """Concise, actionable message for display."""
        exchange = self.context.exchange
        name = getattr(exchange, "display_name", str(exchange)).capitalize()
        template = _USER_MESSAGES[self.kind]
        if self.kind is DomainErrorKind.UNKNOWN and self.context.request_id:
            return (
                "Unexpected error. Retry or contact support with ID "
                f"{self.context.request_id}."
            )
        return template.format(exchange=name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, APIDomainError):
            return NotImplemented
        return self.kind is other.kind and self.context == other.context

    def __hash__(self) -> int:
        return hash((self.kind, self.context))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(context={self.context!r})"


class InvalidCredentialsError(APIDomainError):
    kind = DomainErrorKind.INVALID_CREDENTIALS


class PermissionDeniedError(APIDomainError):
    kind = DomainErrorKind.PERMISSION_DENIED


class IPNotAllowedError(APIDomainError):
    kind = DomainErrorKind.IP_NOT_ALLOWED


class KeyRevokedOrInactiveError(APIDomainError):
    kind = DomainErrorKind.KEY_REVOKED_OR_INACTIVE


class SignatureInvalidError(APIDomainError):
    kind = DomainErrorKind.SIGNATURE_INVALID


class TimestampOutOfRangeError(APIDomainError):
    kind = DomainErrorKind.TIMESTAMP_OUT_OF_RANGE


class MissingOrInvalidParamsError(APIDomainError):
    kind = DomainErrorKind.MISSING_OR_INVALID_PARAMS


class RateLimitedError(APIDomainError):
    kind = DomainErrorKind.RATE_LIMITED


class MaintenanceError(APIDomainError):
    kind = DomainErrorKind.MAINTENANCE


class ServerError(APIDomainError):
    kind = DomainErrorKind.SERVER


class NetworkError(APIDomainError):
    kind = DomainErrorKind.NETWORK


class UnknownAPIError(APIDomainError):
    kind = DomainErrorKind.UNKNOWN


_USER_MESSAGES: Dict[DomainErrorKind, str] = {
    DomainErrorKind.INVALID_CREDENTIALS:
        "{exchange} rejected your credentials. Re-enter API key and secret.",
    DomainErrorKind.PERMISSION_DENIED:
        "Your key lacks required permissions. Update key or create a new one.",
    DomainErrorKind.IP_NOT_ALLOWED:
        "Your API key is restricted by IP. Add this device's IP.",
    DomainErrorKind.KEY_REVOKED_OR_INACTIVE:
        "Your API key is inactive or revoked. Create a new key and update it.",
    DomainErrorKind.SIGNATURE_INVALID:
        "Invalid request signature. Verify secret and passphrase.",
    DomainErrorKind.TIMESTAMP_OUT_OF_RANGE:
        "Your device time is out of sync. Enable automatic time sync.",
    DomainErrorKind.MISSING_OR_INVALID_PARAMS:
        "The request had missing or invalid parameters. Please try again.",
    DomainErrorKind.RATE_LIMITED:
        "Rate limit reached. Wait a moment, then retry.",
    DomainErrorKind.MAINTENANCE:
        "{exchange} is under maintenance. Try again later.",
    DomainErrorKind.SERVER:
        "{exchange} server error. Try again later.",
    DomainErrorKind.NETWORK:
        "No network or unstable connection. Check your internet.",
    DomainErrorKind.UNKNOWN:
        "Unexpected error. Please try again.",
}

DOMAIN_ERROR_CLASSES: Dict[DomainErrorKind, Type[APIDomainError]] = {
    cls.kind: cls
    for cls in (
        InvalidCredentialsError,
        PermissionDeniedError,
        IPNotAllowedError,
        KeyRevokedOrInactiveError,
        SignatureInvalidError,
        TimestampOutOfRangeError,
        MissingOrInvalidParamsError,
        RateLimitedError,
        MaintenanceError,
        ServerError,
        NetworkError,
        UnknownAPIError,
    )
}


def domain_error(kind: DomainErrorKind, context: APIErrorContext) -> APIDomainError:
    """Create the domain error subclass matching `kind`."""
    return DOMAIN_ERROR_CLASSES[kind](context)
