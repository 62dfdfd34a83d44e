"""
Unit tests for two-stage error detection.
"""

import pytest

from walletwatch.exchange.error_detectors import (
    HTTPStatusErrorDetector,
    detect_application_error,
    detector_for
)
from walletwatch.exchange.exceptions import (
    APIDomainError,
    DomainErrorKind,
    NetworkError,
    UnknownAPIError
)
from walletwatch.exchange.exchange_config import ExchangeSelector
from walletwatch.exchange.models import HTTPResponse
from tests import fixtures


BYBIT = ExchangeSelector.make("bybit", "unified")
KUCOIN = ExchangeSelector.make("kucoin", "futures")
BINANCE = ExchangeSelector.make("binance", "futures")
URL = "https://api.example.com/balance"


def _ok(body: bytes, url: str = URL) -> HTTPResponse:
    return HTTPResponse(status_code=200, body=body, url=url)


def _detect_app(exchange, body):
    with pytest.raises(APIDomainError) as exc_info:
        detect_application_error(exchange, body, _ok(body))
    return exc_info.value


@pytest.mark.unit
@pytest.mark.parametrize("body,kind,code", [
    (fixtures.BYBIT_ERROR_API_KEY_EXPIRED, DomainErrorKind.KEY_REVOKED_OR_INACTIVE, "33004"),
    (fixtures.BYBIT_ERROR_INVALID_SIGNATURE, DomainErrorKind.SIGNATURE_INVALID, "10004"),
    (fixtures.BYBIT_ERROR_IP_NOT_ALLOWED, DomainErrorKind.IP_NOT_ALLOWED, "10006"),
    (fixtures.BYBIT_ERROR_RATE_LIMITED, DomainErrorKind.RATE_LIMITED, "10016"),
    (fixtures.BYBIT_ERROR_PERMISSION_DENIED, DomainErrorKind.PERMISSION_DENIED, "10018"),
    (fixtures.BYBIT_ERROR_UNKNOWN, DomainErrorKind.UNKNOWN, "99999"),
])
def test_bybit_application_errors(body, kind, code):
    """Test Bybit retCode mapping."""
    error = _detect_app(BYBIT, body)

    assert error.kind is kind
    assert error.api_code == code
    assert error.http_status == 200
    assert error.context.endpoint == URL


@pytest.mark.unit
def test_bybit_expired_key_keeps_raw_message():
    """Test raw message and exchange are recorded."""
    error = _detect_app(BYBIT, fixtures.BYBIT_ERROR_API_KEY_EXPIRED)

    assert error.context.raw_message == "Your api key has expired."
    assert error.context.exchange == BYBIT


@pytest.mark.unit
@pytest.mark.parametrize("body,kind,code,message", [
    (fixtures.KUCOIN_ERROR_API_KEY_NOT_EXISTS, DomainErrorKind.INVALID_CREDENTIALS, "400003", "KC-API-KEY not exists"),
    (fixtures.KUCOIN_ERROR_INVALID_PASSPHRASE, DomainErrorKind.INVALID_CREDENTIALS, "400004", "Invalid KC-API-PASSPHRASE"),
    (fixtures.KUCOIN_ERROR_INVALID_SIGNATURE, DomainErrorKind.SIGNATURE_INVALID, "400005", "KC-API-SIGN Invalid"),
    (fixtures.KUCOIN_ERROR_PERMISSION_DENIED, DomainErrorKind.PERMISSION_DENIED, "400006", "Permission denied"),
    (fixtures.KUCOIN_ERROR_RATE_LIMITED, DomainErrorKind.RATE_LIMITED, "429000", "Too Many Requests"),
    (fixtures.KUCOIN_ERROR_UNKNOWN, DomainErrorKind.UNKNOWN, "900001", "Unexpected error"),
])
def test_kucoin_application_errors(body, kind, code, message):
    """Test KuCoin string code mapping."""
    error = _detect_app(KUCOIN, body)

    assert error.kind is kind
    assert error.api_code == code
    assert error.context.raw_message == message
    assert error.http_status == 200
    assert error.context.exchange == KUCOIN


@pytest.mark.unit
@pytest.mark.parametrize("body,kind,code,message", [
    (fixtures.BINANCE_ERROR_INVALID_API_KEY, DomainErrorKind.INVALID_CREDENTIALS, "-2014", "API-key format invalid."),
    (fixtures.BINANCE_ERROR_INVALID_KEY_IP_PERMISSIONS, DomainErrorKind.INVALID_CREDENTIALS, "-2015",
     "Invalid API-key, IP, or permissions for action."),
    (fixtures.BINANCE_ERROR_INVALID_SIGNATURE, DomainErrorKind.SIGNATURE_INVALID, "-1022",
     "Signature for this request is not valid."),
    (fixtures.BINANCE_ERROR_TIMESTAMP, DomainErrorKind.TIMESTAMP_OUT_OF_RANGE, "-1021",
     "Timestamp for this request is outside of the recvWindow."),
    (fixtures.BINANCE_ERROR_RATE_LIMITED, DomainErrorKind.RATE_LIMITED, "-1003", "Too much request weight used"),
    (fixtures.BINANCE_ERROR_UNKNOWN, DomainErrorKind.UNKNOWN, "-9999", "Unexpected error"),
])
def test_binance_application_errors(body, kind, code, message):
    """Test Binance negative code mapping."""
    error = _detect_app(BINANCE, body)

    assert error.kind is kind
    assert error.api_code == code
    assert error.context.raw_message == message
    assert error.http_status == 200
    assert error.context.exchange == BINANCE


@pytest.mark.unit
@pytest.mark.parametrize("exchange,body", [
    (BYBIT, fixtures.BYBIT_SUCCESS_UNIFIED),
    (KUCOIN, fixtures.KUCOIN_SUCCESS_FUTURES),
    (BINANCE, fixtures.BINANCE_SUCCESS_FUTURES),
    (BYBIT, fixtures.INVALID_JSON),
    (KUCOIN, fixtures.EMPTY_RESPONSE),
    (BINANCE, fixtures.EMPTY_ARRAY),
    (BYBIT, fixtures.EMPTY_OBJECT),
])
def test_success_and_unreadable_bodies_pass(exchange, body):
    """Test success envelopes and unreadable bodies raise nothing."""
    detect_application_error(exchange, body, _ok(body))


@pytest.mark.unit
@pytest.mark.parametrize("exchange,body", [
    (BYBIT, b'{"retCode": "10003", "retMsg": "string code"}'),
    (BYBIT, b'{"retCode": 10003}'),
    (BYBIT, b'{"retCode": true, "retMsg": "bool code"}'),
    (KUCOIN, b'{"code": 400003, "msg": "int code"}'),
    (BINANCE, b'{"code": "-1022", "msg": "string code"}'),
    (BINANCE, b'{"code": 0, "msg": "zero"}'),
])
def test_malformed_envelopes_pass(exchange, body):
    """Test envelopes with the wrong field types are not errors."""
    detect_application_error(exchange, body, _ok(body))


@pytest.mark.unit
def test_endpoint_falls_back_to_exchange_name():
    """Test the context endpoint when the response has no URL."""
    body = fixtures.BINANCE_ERROR_TIMESTAMP
    with pytest.raises(APIDomainError) as exc_info:
        detect_application_error(BINANCE, body, HTTPResponse(status_code=200, body=body))

    assert exc_info.value.context.endpoint == "Binance Endpoint"


@pytest.mark.unit
@pytest.mark.parametrize("status,kind", [
    (401, DomainErrorKind.INVALID_CREDENTIALS),
    (403, DomainErrorKind.PERMISSION_DENIED),
    (429, DomainErrorKind.RATE_LIMITED),
    (500, DomainErrorKind.SERVER),
    (404, DomainErrorKind.UNKNOWN),
])
def test_http_status_stage(status, kind):
    """Test non-200 statuses are mapped before body inspection."""
    detector = HTTPStatusErrorDetector(BYBIT, URL)

    with pytest.raises(APIDomainError) as exc_info:
        detector.detect_error(b"", HTTPResponse(status_code=status, url=URL))

    assert exc_info.value.kind is kind
    assert exc_info.value.http_status == status
    assert exc_info.value.context.endpoint == URL


@pytest.mark.unit
def test_http_status_stage_skips_application_codes():
    """Test a non-200 status wins over an application code in the body."""
    detector = detector_for(BYBIT, URL)
    body = fixtures.BYBIT_ERROR_API_KEY_EXPIRED

    with pytest.raises(APIDomainError) as exc_info:
        detector.detect(body, HTTPResponse(status_code=401, body=body))

    assert exc_info.value.kind is DomainErrorKind.INVALID_CREDENTIALS


@pytest.mark.unit
def test_delegates_to_application_detector():
    """Test HTTP 200 bodies are inspected."""
    detector = detector_for(KUCOIN, URL)
    body = fixtures.KUCOIN_ERROR_API_KEY_NOT_EXISTS

    with pytest.raises(APIDomainError) as exc_info:
        detector.detect_error(body, _ok(body))

    assert exc_info.value.kind is DomainErrorKind.INVALID_CREDENTIALS


@pytest.mark.unit
def test_application_stage_can_be_disabled():
    """Test the HTTP-only detector ignores 200 bodies."""
    detector = HTTPStatusErrorDetector(KUCOIN, URL, check_application_errors=False)
    body = fixtures.KUCOIN_ERROR_API_KEY_NOT_EXISTS

    detector.detect_error(body, _ok(body))


@pytest.mark.unit
def test_success_response_passes():
    """Test a successful response raises nothing."""
    detector_for(BINANCE, URL).detect_error(
        fixtures.BINANCE_SUCCESS_FUTURES, _ok(fixtures.BINANCE_SUCCESS_FUTURES)
    )


@pytest.mark.unit
def test_missing_response_is_network_error():
    """Test a None response maps to a network error."""
    with pytest.raises(NetworkError):
        detector_for(BYBIT, URL).detect_error(b"", None)


@pytest.mark.unit
def test_unknown_error_is_not_network_error():
    """Test kinds are distinct classes."""
    assert not issubclass(UnknownAPIError, NetworkError)
