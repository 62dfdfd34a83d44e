"""
Exchange module: request signing, error detection and balance parsing.
"""

from .exceptions import (
    ExchangeError,
    TransportError,
    CredentialsNotFoundError,
    APIError,
    InvalidRequestError,
    NoDataError,
    ParseError,
    DomainErrorKind,
    APIErrorContext,
    APIDomainError,
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
    domain_error
)
from .exchange_config import (
    ExchangeName,
    WalletType,
    ExchangeConfig,
    ExchangeSelector,
    get_exchange_config
)
from .models import WalletSnapshot, SignedRequest, HTTPResponse
from .credentials import (
    Credentials,
    CredentialProvider,
    InMemoryCredentialProvider,
    EnvCredentialProvider
)
from .request_builders import build_request, build_request_for
from .error_detectors import HTTPStatusErrorDetector, detect_application_error
from .parsers import parser_for
from .transport import Transport, AiohttpTransport
from .balance_service import BalanceService

__all__ = [
    # Exceptions
    "ExchangeError",
    "TransportError",
    "CredentialsNotFoundError",
    "APIError",
    "InvalidRequestError",
    "NoDataError",
    "ParseError",
    "DomainErrorKind",
    "APIErrorContext",
    "APIDomainError",
    "InvalidCredentialsError",
    "PermissionDeniedError",
    "IPNotAllowedError",
    "KeyRevokedOrInactiveError",
    "SignatureInvalidError",
    "TimestampOutOfRangeError",
    "MissingOrInvalidParamsError",
    "RateLimitedError",
    "MaintenanceError",
    "ServerError",
    "NetworkError",
    "UnknownAPIError",
    "domain_error",

    # Exchange config
    "ExchangeName",
    "WalletType",
    "ExchangeConfig",
    "ExchangeSelector",
    "get_exchange_config",

    # Data models
    "WalletSnapshot",
    "SignedRequest",
    "HTTPResponse",

    # Credentials
    "Credentials",
    "CredentialProvider",
    "InMemoryCredentialProvider",
    "EnvCredentialProvider",

    # Pipeline
    "build_request",
    "build_request_for",
    "HTTPStatusErrorDetector",
    "detect_application_error",
    "parser_for",
    "Transport",
    "AiohttpTransport",
    "BalanceService"
]
