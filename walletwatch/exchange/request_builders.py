"""
Signed request builders for wallet balance queries.

Each exchange signs differently, but all of them embed the current time in
milliseconds, so a request is built fresh for every call and never reused.
"""

from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

from .credentials import CredentialProvider, Credentials
from .exceptions import CredentialsNotFoundError
from .exchange_config import PLACEHOLDER, ExchangeName, ExchangeSelector, WalletType
from .models import SignedRequest
from ..utils.logger import get_logger
from ..utils.signing import (
    bytes_to_base64,
    current_timestamp_ms,
    hex_to_base64,
    hmac_sha256_hex
)


logger = get_logger(__name__)

RECV_WINDOW = "5000"
KUCOIN_API_KEY_VERSION = "3"

RequestBuilder = Callable[..., Optional[SignedRequest]]


def _resolve_url(selector: ExchangeSelector, testnet: bool) -> Optional[str]:
    """
    Join base URL and endpoint, refusing placeholders and malformed URLs.
    """
    base_url = selector.config.base_url(selector.wallet_type, testnet=testnet)
    endpoint = selector.endpoint

    if PLACEHOLDER in (base_url, endpoint):
        logger.warning(
            "Unsupported wallet type for exchange",
            exchange=selector.display_name,
            wallet=selector.wallet_type.value,
            available=[w.value for w in selector.available_wallet_types]
        )
        return None

    url = base_url + endpoint
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        logger.warning("Invalid request URL", exchange=selector.display_name, url=url)
        return None

    return url


# ============================================================================
# Bybit
# ============================================================================

def build_bybit_request(
    selector: ExchangeSelector,
    credentials: Credentials,
    timestamp: Optional[str] = None,
    testnet: bool = False
) -> Optional[SignedRequest]:
    """
    Build a Bybit V5 wallet-balance request.

    Signature: HMAC-SHA256(timestamp + api_key + recv_window + query), hex.
    The endpoint already carries the accountType query matching the wallet.
    """
    url = _resolve_url(selector, testnet)
    if url is None:
        return None

    timestamp = timestamp or current_timestamp_ms()
    account_type = "SPOT" if selector.wallet_type == WalletType.SPOT else "UNIFIED"
    query_string = f"accountType={account_type}"

    payload = timestamp + credentials.api_key + RECV_WINDOW + query_string
    signature = hmac_sha256_hex(payload, credentials.api_secret)

    return SignedRequest(
        method="GET",
        url=url,
        headers={
            "X-BAPI-API-KEY": credentials.api_key,
            "X-BAPI-TIMESTAMP": timestamp,
            "X-BAPI-RECV-WINDOW": RECV_WINDOW,
            "X-BAPI-SIGN": signature,
        }
    )


# ============================================================================
# KuCoin
# ============================================================================

def kucoin_passphrase(
    credentials: Credentials,
    api_key_version: str = KUCOIN_API_KEY_VERSION
) -> str:
    """
    Encode the passphrase for the KC-API-PASSPHRASE header.

    Version 3 keys send base64(HMAC-SHA256(passphrase, secret)); older keys
    send the base64 of the raw passphrase.
    """
    passphrase = credentials.passphrase
    if passphrase is None:
        return ""

    if api_key_version == "3":
        return hex_to_base64(hmac_sha256_hex(passphrase, credentials.api_secret))

    return bytes_to_base64(passphrase.encode("utf-8"))


def build_kucoin_request(
    selector: ExchangeSelector,
    credentials: Credentials,
    timestamp: Optional[str] = None,
    testnet: bool = False,
    api_key_version: str = KUCOIN_API_KEY_VERSION
) -> Optional[SignedRequest]:
    """
    Build a KuCoin account request.

    Signature: base64(HMAC-SHA256(timestamp + method + endpoint + body)),
    with an empty body for GET.
    """
    url = _resolve_url(selector, testnet)
    if url is None:
        return None

    timestamp = timestamp or current_timestamp_ms()
    method = "GET"

    payload = timestamp + method + selector.endpoint
    signature = hex_to_base64(hmac_sha256_hex(payload, credentials.api_secret))

    return SignedRequest(
        method=method,
        url=url,
        headers={
            "KC-API-KEY": credentials.api_key,
            "KC-API-TIMESTAMP": timestamp,
            "KC-API-SIGN": signature,
            "KC-API-PASSPHRASE": kucoin_passphrase(credentials, api_key_version),
            "KC-API-KEY-VERSION": api_key_version,
        }
    )


# ============================================================================
# Binance
# ============================================================================

def build_binance_request(
    selector: ExchangeSelector,
    credentials: Credentials,
    timestamp: Optional[str] = None,
    testnet: bool = False
) -> Optional[SignedRequest]:
    """
    Build a Binance USDT-M futures account request (GET /fapi/v2/account).

    Signature: HMAC-SHA256 hex of the exact query string, appended as the
    last query parameter.
    """
    url = _resolve_url(selector, testnet)
    if url is None:
        return None

    timestamp = timestamp or current_timestamp_ms()
    query_string = f"timestamp={timestamp}&recvWindow={RECV_WINDOW}"
    signature = hmac_sha256_hex(query_string, credentials.api_secret)

    return SignedRequest(
        method="GET",
        url=f"{url}?{query_string}&signature={signature}",
        headers={"X-MBX-APIKEY": credentials.api_key}
    )


# ============================================================================
# Dispatch
# ============================================================================

REQUEST_BUILDERS: Dict[ExchangeName, RequestBuilder] = {
    ExchangeName.BYBIT: build_bybit_request,
    ExchangeName.KUCOIN: build_kucoin_request,
    ExchangeName.BINANCE: build_binance_request,
}


def build_request(
    selector: ExchangeSelector,
    credentials: Credentials,
    timestamp: Optional[str] = None,
    testnet: bool = False
) -> Optional[SignedRequest]:
    """Build the signed wallet-balance request for any supported exchange."""
    builder = REQUEST_BUILDERS[selector.name]
    return builder(selector, credentials, timestamp=timestamp, testnet=testnet)


async def build_request_for(
    selector: ExchangeSelector,
    credential_provider: CredentialProvider,
    testnet: bool = False
) -> Optional[SignedRequest]:
    """
    Look up credentials for the selector's exchange and build its request.

    Returns:
        SignedRequest, or None when credentials are unavailable or the
        wallet type has no endpoint
    """
    account = selector.display_name

    try:
        credentials = await credential_provider.get_credentials(account)
    except CredentialsNotFoundError:
        logger.warning("No credentials stored", account=account)
        return None
    except Exception as e:
        logger.error(
            "Credential lookup failed",
            account=account,
            error=str(e),
            error_type=type(e).__name__
        )
        return None

    return build_request(selector, credentials, testnet=testnet)
