"""
Unit tests for the domain error taxonomy.
"""

import pytest

from walletwatch.exchange.exceptions import (
    DOMAIN_ERROR_CLASSES,
    APIDomainError,
    APIErrorContext,
    DomainErrorKind,
    InvalidRequestError,
    MaintenanceError,
    NetworkError,
    ParseError,
    UnknownAPIError,
    domain_error
)
from walletwatch.exchange.exchange_config import ExchangeSelector


BYBIT = ExchangeSelector.make("bybit", "unified")


@pytest.mark.unit
def test_every_kind_has_a_class():
    """Test the taxonomy is complete and flat."""
    assert len(DomainErrorKind) == 12
    assert set(DOMAIN_ERROR_CLASSES) == set(DomainErrorKind)

    for kind in DomainErrorKind:
        error = domain_error(kind, APIErrorContext(exchange=BYBIT))
        assert isinstance(error, APIDomainError)
        assert error.kind is kind
        assert error.message_key == f"api.{kind.value}.message"
        assert error.user_message


@pytest.mark.unit
def test_user_message_names_exchange():
    """Test exchange-specific messages use the display name."""
    error = MaintenanceError(APIErrorContext(exchange=BYBIT, http_status=503))
    assert error.user_message == "Bybit is under maintenance. Try again later."
    assert str(error) == error.user_message


@pytest.mark.unit
def test_unknown_user_message_with_request_id():
    """Test the request id is surfaced for unknown errors."""
    error = UnknownAPIError(APIErrorContext(exchange=BYBIT, request_id="req-42"))
    assert "req-42" in error.user_message

    without_id = UnknownAPIError(APIErrorContext(exchange=BYBIT))
    assert without_id.user_message == "Unexpected error. Please try again."


@pytest.mark.unit
def test_domain_error_equality():
    """Test equality uses kind and context."""
    context = APIErrorContext(exchange=BYBIT, http_status=401, api_code="10003")

    assert NetworkError(context) == NetworkError(context)
    assert NetworkError(context) != UnknownAPIError(context)
    assert NetworkError(context) != NetworkError(APIErrorContext(exchange=BYBIT))
    assert len({NetworkError(context), NetworkError(context)}) == 1


@pytest.mark.unit
def test_domain_error_accessors():
    """Test http_status and api_code shortcuts."""
    error = domain_error(
        DomainErrorKind.RATE_LIMITED,
        APIErrorContext(exchange=BYBIT, http_status=429, api_code="10016")
    )
    assert error.http_status == 429
    assert error.api_code == "10016"


@pytest.mark.unit
def test_local_errors_have_default_messages():
    """Test local failures carry no exchange context."""
    assert str(InvalidRequestError()) == "Invalid API request"
    assert str(ParseError()) == "Failed to parse API response"
    assert str(ParseError("custom")) == "custom"
    assert not isinstance(ParseError(), APIDomainError)
