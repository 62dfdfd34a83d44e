"""
Two-stage error detection for wallet balance responses.

Stage 1 checks the HTTP status. Stage 2 runs only on HTTP 200 and looks for
an exchange error envelope inside the body: Bybit, KuCoin and Binance all
report some failures with a 200 status.

A body that cannot be read is never an error here. It is handed to the
parser, which reports it as a ParseError.
"""

from typing import Any, Callable, Dict, Optional

from .error_mapper import load_json_object, map_http_response
from .exceptions import (
    APIErrorContext,
    DomainErrorKind,
    NetworkError,
    UnknownAPIError,
    domain_error
)
from .exchange_config import (
    BINANCE_APP_ERROR_CODES,
    BYBIT_APP_ERROR_CODES,
    KUCOIN_APP_ERROR_CODES,
    ExchangeName,
    ExchangeSelector
)
from .models import HTTPResponse
from ..utils.logger import get_logger


logger = get_logger(__name__)

KUCOIN_SUCCESS_CODE = "200000"

ApplicationErrorDetector = Callable[[ExchangeSelector, bytes, HTTPResponse], None]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _raise_app_error(
    exchange: ExchangeSelector,
    kind: Optional[DomainErrorKind],
    code: str,
    message: str,
    response: HTTPResponse
) -> None:
    context = APIErrorContext(
        exchange=exchange,
        http_status=200,
        api_code=code,
        endpoint=response.url or f"{exchange.display_name.capitalize()} Endpoint",
        raw_message=message
    )
    error = domain_error(kind or DomainErrorKind.UNKNOWN, context)

    logger.warning(
        "Application-level API error",
        exchange=str(exchange),
        code=code,
        message=message,
        kind=error.kind.value
    )
    raise error


def detect_bybit_error(
    exchange: ExchangeSelector,
    data: bytes,
    response: HTTPResponse
) -> None:
    """
    Bybit format:
    {"retCode":33004,"retMsg":"Your api key has expired.","result":{},...}
    """
    json_body = load_json_object(data)
    if json_body is None:
        return

    ret_code = json_body.get("retCode")
    ret_msg = json_body.get("retMsg")
    if _is_int(ret_code) and ret_code != 0 and isinstance(ret_msg, str):
        kind = BYBIT_APP_ERROR_CODES.get(ret_code)
        _raise_app_error(exchange, kind, str(ret_code), ret_msg, response)


def detect_kucoin_error(
    exchange: ExchangeSelector,
    data: bytes,
    response: HTTPResponse
) -> None:
    """
    KuCoin format: {"code":"400003","msg":"KC-API-KEY not exists"}
    """
    json_body = load_json_object(data)
    if json_body is None:
        return

    code = json_body.get("code")
    msg = json_body.get("msg")
    if isinstance(code, str) and code != KUCOIN_SUCCESS_CODE and isinstance(msg, str):
        kind = KUCOIN_APP_ERROR_CODES.get(code)
        _raise_app_error(exchange, kind, code, msg, response)


def detect_binance_error(
    exchange: ExchangeSelector,
    data: bytes,
    response: HTTPResponse
) -> None:
    """
    Binance format: {"code":-1022,"msg":"Signature for this request is not valid."}
    """
    json_body = load_json_object(data)
    if json_body is None:
        return

    code = json_body.get("code")
    msg = json_body.get("msg")
    if _is_int(code) and code != 0 and isinstance(msg, str):
        kind = BINANCE_APP_ERROR_CODES.get(code)
        _raise_app_error(exchange, kind, str(code), msg, response)


APPLICATION_ERROR_DETECTORS: Dict[ExchangeName, ApplicationErrorDetector] = {
    ExchangeName.BYBIT: detect_bybit_error,
    ExchangeName.KUCOIN: detect_kucoin_error,
    ExchangeName.BINANCE: detect_binance_error,
}


def detect_application_error(
    exchange: ExchangeSelector,
    data: bytes,
    response: HTTPResponse
) -> None:
    """
    Raise the domain error reported inside a 200 body, if any.

    Raises:
        APIDomainError: If the body carries a non-success exchange code
    """
    APPLICATION_ERROR_DETECTORS[exchange.name](exchange, data, response)


class HTTPStatusErrorDetector:
    """
    Composite detector: HTTP status first, then the application-level
    detector of the exchange.
    """

    def __init__(
        self,
        exchange: ExchangeSelector,
        endpoint: str,
        check_application_errors: bool = True
    ):
        """
        Initialize detector.

        Args:
            exchange: Selector the response belongs to
            endpoint: Endpoint recorded in error contexts
            check_application_errors: Run stage 2 on HTTP 200 responses
        """
        self.exchange = exchange
        self.endpoint = endpoint
        self.check_application_errors = check_application_errors

    def detect_error(self, data: bytes, response: Optional[HTTPResponse]) -> None:
        """
        Raise a domain error if the response is a failure.

        Args:
            data: Raw response body
            response: HTTP response, or None if the transport returned nothing

        Raises:
            APIDomainError: On any HTTP or application-level failure
        """
        if response is None:
            context = APIErrorContext(
                exchange=self.exchange,
                endpoint=self.endpoint,
                raw_message="No HTTP response received"
            )
            raise NetworkError(context)

        # Step 1: HTTP status
        if response.status_code != 200:
            logger.warning(
                "HTTP error response",
                exchange=str(self.exchange),
                status=response.status_code,
                body=data[:500].decode("utf-8", errors="replace") if data else ""
            )

            domain = map_http_response(self.exchange, self.endpoint, data, response)
            if domain is not None:
                raise domain

            context = APIErrorContext(
                exchange=self.exchange,
                http_status=response.status_code,
                endpoint=self.endpoint,
                raw_message=f"HTTP {response.status_code}"
            )
            raise UnknownAPIError(context)

        # Step 2: application-level errors (even with HTTP 200)
        if self.check_application_errors:
            detect_application_error(self.exchange, data, response)

    # Short name used by the fetch pipeline
    detect = detect_error


def detector_for(exchange: ExchangeSelector, endpoint: str) -> HTTPStatusErrorDetector:
    """Create the full two-stage detector for a selector."""
    return HTTPStatusErrorDetector(exchange, endpoint)
