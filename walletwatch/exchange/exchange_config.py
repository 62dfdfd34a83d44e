"""
Exchange-specific configurations for multi-exchange balance queries.

This module contains exchange-specific settings such as:
- REST endpoints per wallet type
- Supported wallet types
- Error code mappings
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from .exceptions import DomainErrorKind


# Marker for exchange/wallet combinations that have no endpoint
PLACEHOLDER = "xxx"


class ExchangeName(Enum):
    """Supported exchanges."""
    BYBIT = "bybit"
    KUCOIN = "kucoin"
    BINANCE = "binance"
    # Add more exchanges as needed


class WalletType(Enum):
    """Account sub-types, each with its own balance semantics."""
    SPOT = "spot"
    FUTURES = "futures"
    UNIFIED = "unified"


@dataclass(frozen=True)
class ExchangeConfig:
    """
    Configuration for a specific exchange.

    Wallet types missing from `endpoints` resolve to PLACEHOLDER, which
    request builders refuse to sign.
    """
    exchange_name: ExchangeName
    name: str

    # Endpoints
    rest_base_url: str
    rest_testnet_url: str
    endpoints: Dict[WalletType, str]

    # Per-wallet base URL overrides (KuCoin futures lives on its own host)
    base_url_overrides: Dict[WalletType, str] = field(default_factory=dict)

    # Wallet types offered in the canonical configuration
    available_wallet_types: List[WalletType] = field(default_factory=list)

    def base_url(self, wallet_type: WalletType, testnet: bool = False) -> str:
        if wallet_type not in self.endpoints:
            return PLACEHOLDER
        if wallet_type in self.base_url_overrides:
            return self.base_url_overrides[wallet_type]
        return self.rest_testnet_url if testnet else self.rest_base_url

    def endpoint(self, wallet_type: WalletType) -> str:
        return self.endpoints.get(wallet_type, PLACEHOLDER)


# ============================================================================
# BYBIT CONFIGURATION
# ============================================================================

BYBIT_CONFIG = ExchangeConfig(
    exchange_name=ExchangeName.BYBIT,
    name="bybit",

    # REST Endpoints
    rest_base_url="https://api.bybit.com",
    rest_testnet_url="https://api-testnet.bybit.com",

    endpoints={
        WalletType.SPOT: "/v5/account/wallet-balance?accountType=SPOT",
        WalletType.UNIFIED: "/v5/account/wallet-balance?accountType=UNIFIED",
    },

    available_wallet_types=[WalletType.UNIFIED],
)


# ============================================================================
# KUCOIN CONFIGURATION
# ============================================================================

KUCOIN_CONFIG = ExchangeConfig(
    exchange_name=ExchangeName.KUCOIN,
    name="kucoin",

    # REST Endpoints (KuCoin has no public testnet)
    rest_base_url="https://api.kucoin.com",
    rest_testnet_url="https://api.kucoin.com",

    endpoints={
        WalletType.SPOT: "/api/v1/accounts?type=main",
        WalletType.FUTURES: "/api/v1/account-overview?currency=USDT",
    },
    base_url_overrides={
        WalletType.FUTURES: "https://api-futures.kucoin.com",
    },

    available_wallet_types=[WalletType.FUTURES],
)


# ============================================================================
# BINANCE CONFIGURATION
# ============================================================================

BINANCE_CONFIG = ExchangeConfig(
    exchange_name=ExchangeName.BINANCE,
    name="binance",

    # REST Endpoints (USDT-M futures)
    rest_base_url="https://fapi.binance.com",
    rest_testnet_url="https://testnet.binancefuture.com",

    endpoints={
        WalletType.FUTURES: "/fapi/v2/account",
    },

    available_wallet_types=[WalletType.FUTURES],
)


# ============================================================================
# EXCHANGE REGISTRY
# ============================================================================

EXCHANGE_CONFIGS: Dict[ExchangeName, ExchangeConfig] = {
    ExchangeName.BYBIT: BYBIT_CONFIG,
    ExchangeName.KUCOIN: KUCOIN_CONFIG,
    ExchangeName.BINANCE: BINANCE_CONFIG,
}


def get_exchange_config(exchange_name: ExchangeName) -> ExchangeConfig:
    """
    Get configuration for a specific exchange.

    Args:
        exchange_name: Exchange to look up

    Returns:
        ExchangeConfig instance

    Raises:
        ValueError: If exchange is not supported
    """
    if exchange_name not in EXCHANGE_CONFIGS:
        raise ValueError(f"Unsupported exchange: {exchange_name}")

    return EXCHANGE_CONFIGS[exchange_name]


@dataclass(frozen=True)
class ExchangeSelector:
    """
    An exchange paired with one of its wallet types.

    Immutable; equality and hash use both fields. Not every combination is
    backed by an endpoint, see `is_supported`.
    """
    name: ExchangeName
    wallet_type: WalletType

    @classmethod
    def make(
        cls,
        name: Union[ExchangeName, str],
        wallet: Union[WalletType, str]
    ) -> "ExchangeSelector":
        """
        Build a selector from enum members or their string values.

        Raises:
            ValueError: If the exchange or wallet name is unknown
        """
        if not isinstance(name, ExchangeName):
            name = ExchangeName(str(name).lower())
        if not isinstance(wallet, WalletType):
            wallet = WalletType(str(wallet).lower())
        return cls(name, wallet)

    @property
    def config(self) -> ExchangeConfig:
        return get_exchange_config(self.name)

    @property
    def display_name(self) -> str:
        return self.config.name

    @property
    def available_wallet_types(self) -> List[WalletType]:
        return list(self.config.available_wallet_types)

    @property
    def base_url(self) -> str:
        return self.config.base_url(self.wallet_type)

    @property
    def endpoint(self) -> str:
        return self.config.endpoint(self.wallet_type)

    @property
    def is_supported(self) -> bool:
        return PLACEHOLDER not in (self.base_url, self.endpoint)

    def __str__(self) -> str:
        return f"{self.name.value}/{self.wallet_type.value}"


# ============================================================================
# ERROR CODE MAPPINGS
# ============================================================================
#
# Each exchange has two tables. The application-level one is applied to
# HTTP 200 bodies that carry a failure code; the HTTP-status one is applied
# to non-200 responses. They disagree on some codes (Bybit 10006 is
# ipNotAllowed in one and invalidCredentials in the other) and are kept
# apart on purpose until product review settles them.

BYBIT_APP_ERROR_CODES: Dict[int, DomainErrorKind] = {
    10003: DomainErrorKind.KEY_REVOKED_OR_INACTIVE,   # Invalid api key
    33004: DomainErrorKind.KEY_REVOKED_OR_INACTIVE,   # Api key expired
    10004: DomainErrorKind.SIGNATURE_INVALID,
    10005: DomainErrorKind.SIGNATURE_INVALID,
    10006: DomainErrorKind.IP_NOT_ALLOWED,
    10018: DomainErrorKind.PERMISSION_DENIED,
    10019: DomainErrorKind.PERMISSION_DENIED,
    10016: DomainErrorKind.RATE_LIMITED,
}

KUCOIN_APP_ERROR_CODES: Dict[str, DomainErrorKind] = {
    "400003": DomainErrorKind.INVALID_CREDENTIALS,    # KC-API-KEY not exists
    "400004": DomainErrorKind.INVALID_CREDENTIALS,    # Invalid passphrase
    "400005": DomainErrorKind.SIGNATURE_INVALID,
    "400006": DomainErrorKind.PERMISSION_DENIED,
    "429000": DomainErrorKind.RATE_LIMITED,
}

BINANCE_APP_ERROR_CODES: Dict[int, DomainErrorKind] = {
    -2014: DomainErrorKind.INVALID_CREDENTIALS,       # API-key format invalid
    -2015: DomainErrorKind.INVALID_CREDENTIALS,       # Invalid API-key, IP, or permissions
    -1022: DomainErrorKind.SIGNATURE_INVALID,
    -1021: DomainErrorKind.TIMESTAMP_OUT_OF_RANGE,    # Outside of recvWindow
    -1003: DomainErrorKind.RATE_LIMITED,
}

BYBIT_HTTP_ERROR_CODES: Dict[str, DomainErrorKind] = {
    "10006": DomainErrorKind.INVALID_CREDENTIALS,
    "10005": DomainErrorKind.PERMISSION_DENIED,
    "10004": DomainErrorKind.SIGNATURE_INVALID,
    "10002": DomainErrorKind.TIMESTAMP_OUT_OF_RANGE,
    "10018": DomainErrorKind.IP_NOT_ALLOWED,
}

KUCOIN_HTTP_ERROR_CODES: Dict[str, DomainErrorKind] = {
    "401001": DomainErrorKind.INVALID_CREDENTIALS,
    "401002": DomainErrorKind.INVALID_CREDENTIALS,    # Passphrase
    "401003": DomainErrorKind.SIGNATURE_INVALID,
    "401004": DomainErrorKind.TIMESTAMP_OUT_OF_RANGE,
    "403005": DomainErrorKind.IP_NOT_ALLOWED,
    "429000": DomainErrorKind.RATE_LIMITED,
}

BINANCE_HTTP_ERROR_CODES: Dict[str, DomainErrorKind] = {
    "-2015": DomainErrorKind.INVALID_CREDENTIALS,
    "-2014": DomainErrorKind.INVALID_CREDENTIALS,
    "-1022": DomainErrorKind.SIGNATURE_INVALID,
    "-1021": DomainErrorKind.TIMESTAMP_OUT_OF_RANGE,
    "-1003": DomainErrorKind.RATE_LIMITED,
}

# Binance answers 418 (IP ban) after repeated 429s
BINANCE_IP_BAN_CODE = "418"
BINANCE_IP_BAN_STATUSES = {418, 429}

HTTP_ERROR_CODES: Dict[ExchangeName, Dict[str, DomainErrorKind]] = {
    ExchangeName.BYBIT: BYBIT_HTTP_ERROR_CODES,
    ExchangeName.KUCOIN: KUCOIN_HTTP_ERROR_CODES,
    ExchangeName.BINANCE: BINANCE_HTTP_ERROR_CODES,
}


def lookup_http_error_code(
    exchange_name: ExchangeName,
    code: Optional[str],
    http_status: Optional[int] = None
) -> Optional[DomainErrorKind]:
    """
    Look up an error code from the HTTP-status-path registry.

    Args:
        exchange_name: Exchange that produced the code
        code: Raw code as string (already stripped)
        http_status: HTTP status of the response, if any

    Returns:
        Matching DomainErrorKind or None if the code is not registered
    """
    if code is None:
        return None

    kind = HTTP_ERROR_CODES[exchange_name].get(code)
    if kind is not None:
        return kind

    if (
        exchange_name == ExchangeName.BINANCE
        and code == BINANCE_IP_BAN_CODE
        and http_status in BINANCE_IP_BAN_STATUSES
    ):
        return DomainErrorKind.RATE_LIMITED

    return None
