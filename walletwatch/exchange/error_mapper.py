"""
Maps transport failures, HTTP responses and exchange error payloads to
APIDomainError.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .exceptions import (
    APIDomainError,
    APIErrorContext,
    DomainErrorKind,
    NetworkError,
    domain_error
)
from .exchange_config import ExchangeName, ExchangeSelector, lookup_http_error_code
from .models import HTTPResponse


_MAINTENANCE_HINTS = ("mainten", "unavailable")


@dataclass(frozen=True)
class ParsedErrorBody:
    """Light-weight view of an exchange error body."""
    code: Optional[str] = None
    message: Optional[str] = None
    request_id: Optional[str] = None


def _code_as_string(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def _first_string(json_body: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = json_body.get(key)
        if isinstance(value, str):
            return value
    return None


def load_json_object(data: bytes) -> Optional[Dict[str, Any]]:
    """Decode a JSON object body, or return None if it is not one."""
    try:
        json_body = json.loads(data)
    except (ValueError, TypeError):
        return None
    return json_body if isinstance(json_body, dict) else None


def parse_error_body(exchange: ExchangeSelector, data: bytes) -> ParsedErrorBody:
    """
    Parse a minimal error body for known exchanges without raising.

    Binance: code (int or string) + msg/message
    Bybit:   retCode (int or string) + retMsg/message + req_id/requestId
    KuCoin:  code (string) + msg/message + requestId
    """
    json_body = load_json_object(data)
    if json_body is None:
        return ParsedErrorBody()

    if exchange.name == ExchangeName.BINANCE:
        return ParsedErrorBody(
            code=_code_as_string(json_body.get("code")),
            message=_first_string(json_body, "msg", "message")
        )

    if exchange.name == ExchangeName.BYBIT:
        return ParsedErrorBody(
            code=_code_as_string(json_body.get("retCode")),
            message=_first_string(json_body, "retMsg", "message"),
            request_id=_first_string(json_body, "req_id", "requestId")
        )

    code = json_body.get("code")
    return ParsedErrorBody(
        code=code if isinstance(code, str) else None,
        message=_first_string(json_body, "msg", "message"),
        request_id=_first_string(json_body, "requestId")
    )


def map_registry_code(
    exchange: ExchangeSelector,
    http_status: Optional[int],
    code: Optional[str],
    message: Optional[str],
    endpoint: Optional[str]
) -> Optional[APIDomainError]:
    """
    Map an exchange error code from the HTTP-status-path registry.

    Returns:
        Domain error, or None if the code is unknown for this exchange
    """
    normalized_code = code.strip() if code is not None else None
    kind = lookup_http_error_code(exchange.name, normalized_code, http_status)
    if kind is None:
        return None

    context = APIErrorContext(
        exchange=exchange,
        http_status=http_status,
        api_code=normalized_code,
        endpoint=endpoint,
        raw_message=message
    )
    return domain_error(kind, context)


def map_network_error(
    error: BaseException,
    exchange: ExchangeSelector,
    endpoint: Optional[str]
) -> NetworkError:
    """Map a transport failure (no HTTP response) to a network error."""
    context = APIErrorContext(
        exchange=exchange,
        endpoint=endpoint,
        raw_message=str(error) or type(error).__name__
    )
    return NetworkError(context)


def map_http_response(
    exchange: ExchangeSelector,
    endpoint: Optional[str],
    data: bytes,
    response: HTTPResponse
) -> Optional[APIDomainError]:
    """
    Map an HTTP response and its body to a domain error.

    Returns:
        None for status 200, a domain error for anything else
    """
    status = response.status_code
    if status == 200:
        return None

    body = parse_error_body(exchange, data)
    context = APIErrorContext(
        exchange=exchange,
        http_status=status,
        api_code=body.code,
        request_id=body.request_id,
        endpoint=endpoint,
        raw_message=body.message
    )

    if status in (401, 403):
        mapped = map_registry_code(exchange, status, body.code, body.message, endpoint)
        if mapped is not None:
            return mapped
        if status == 401:
            return domain_error(DomainErrorKind.INVALID_CREDENTIALS, context)
        return domain_error(DomainErrorKind.PERMISSION_DENIED, context)

    if status == 429:
        return domain_error(DomainErrorKind.RATE_LIMITED, context)

    if 500 <= status <= 599:
        hint_text = body.message
        if hint_text is None:
            hint_text = data.decode("utf-8", errors="replace") if data else ""
        lower = hint_text.lower()
        if any(hint in lower for hint in _MAINTENANCE_HINTS):
            return domain_error(DomainErrorKind.MAINTENANCE, context)
        return domain_error(DomainErrorKind.SERVER, context)

    mapped = map_registry_code(exchange, status, body.code, body.message, endpoint)
    if mapped is not None:
        return mapped

    return domain_error(DomainErrorKind.UNKNOWN, context)
