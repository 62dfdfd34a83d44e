"""
Exchange response bodies and credentials shared by the test suite.
"""

from walletwatch.exchange.credentials import Credentials


# ============================================================================
# Bybit
# ============================================================================

BYBIT_SUCCESS_UNIFIED = b"""
{
    "retCode": 0,
    "retMsg": "OK",
    "result": {
        "totalEquity": "1000.00",
        "totalWalletBalance": "900.00"
    },
    "retExtInfo": {},
    "time": 1759564016973
}
"""

BYBIT_SUCCESS_UNIFIED_WITH_MARGIN = b"""
{
    "retCode": 0,
    "retMsg": "OK",
    "result": {
        "totalEquity": "2000.00",
        "totalWalletBalance": "1800.00",
        "totalMaintenanceMargin": "100.00"
    }
}
"""

BYBIT_SUCCESS_SPOT = b"""
{
    "retCode": 0,
    "retMsg": "OK",
    "result": {
        "list": [
            {
                "accountType": "SPOT",
                "coin": [
                    {"coin": "BTC", "walletBalance": "0.0000"},
                    {"coin": "USDT", "walletBalance": "123.45"}
                ]
            }
        ]
    },
    "retExtInfo": {},
    "time": 1759564016973
}
"""

BYBIT_ERROR_API_KEY_EXPIRED = b"""
{"retCode": 33004, "retMsg": "Your api key has expired.", "result": {}, "retExtInfo": {}}
"""

BYBIT_ERROR_INVALID_SIGNATURE = b"""
{"retCode": 10004, "retMsg": "Invalid signature", "result": {}, "retExtInfo": {}}
"""

BYBIT_ERROR_IP_NOT_ALLOWED = b"""
{"retCode": 10006, "retMsg": "IP address not in whitelist", "result": {}, "retExtInfo": {}}
"""

BYBIT_ERROR_RATE_LIMITED = b"""
{"retCode": 10016, "retMsg": "Too many requests", "result": {}, "retExtInfo": {}}
"""

BYBIT_ERROR_PERMISSION_DENIED = b"""
{"retCode": 10018, "retMsg": "Permission denied for this API", "result": {}, "retExtInfo": {}}
"""

BYBIT_ERROR_UNKNOWN = b"""
{"retCode": 99999, "retMsg": "Unknown error occurred", "result": {}, "retExtInfo": {}}
"""


# ============================================================================
# KuCoin
# ============================================================================

KUCOIN_SUCCESS_FUTURES = b"""
{
    "code": "200000",
    "data": {
        "accountEquity": 1000.50,
        "availableBalance": 950.25,
        "currency": "USDT"
    }
}
"""

KUCOIN_SUCCESS_SPOT = b"""
{
    "code": "200000",
    "data": [
        {
            "id": "123456",
            "currency": "USDT",
            "type": "main",
            "balance": "1000.00",
            "available": "950.00",
            "holds": "50.00"
        },
        {
            "id": "123457",
            "currency": "BTC",
            "type": "trade",
            "balance": "0.5",
            "available": "0.5",
            "holds": "0.0"
        }
    ]
}
"""

KUCOIN_ERROR_API_KEY_NOT_EXISTS = b'{"code": "400003", "msg": "KC-API-KEY not exists"}'
KUCOIN_ERROR_INVALID_SIGNATURE = b'{"code": "400005", "msg": "KC-API-SIGN Invalid"}'
KUCOIN_ERROR_PERMISSION_DENIED = b'{"code": "400006", "msg": "Permission denied"}'
KUCOIN_ERROR_RATE_LIMITED = b'{"code": "429000", "msg": "Too Many Requests"}'
KUCOIN_ERROR_INVALID_PASSPHRASE = b'{"code": "400004", "msg": "Invalid KC-API-PASSPHRASE"}'
KUCOIN_ERROR_UNKNOWN = b'{"code": "900001", "msg": "Unexpected error"}'


# ============================================================================
# Binance
# ============================================================================

BINANCE_SUCCESS_FUTURES = b"""
{
    "totalMarginBalance": "1234.56789",
    "totalWalletBalance": "1200.00000",
    "totalMaintMargin": "12.34567",
    "availableBalance": "1100.00000"
}
"""

BINANCE_ERROR_INVALID_API_KEY = b'{"code": -2014, "msg": "API-key format invalid."}'
BINANCE_ERROR_INVALID_SIGNATURE = b'{"code": -1022, "msg": "Signature for this request is not valid."}'
BINANCE_ERROR_TIMESTAMP = b'{"code": -1021, "msg": "Timestamp for this request is outside of the recvWindow."}'
BINANCE_ERROR_RATE_LIMITED = b'{"code": -1003, "msg": "Too much request weight used"}'
BINANCE_ERROR_INVALID_KEY_IP_PERMISSIONS = b'{"code": -2015, "msg": "Invalid API-key, IP, or permissions for action."}'
BINANCE_ERROR_UNKNOWN = b'{"code": -9999, "msg": "Unexpected error"}'


# ============================================================================
# Edge cases
# ============================================================================

INVALID_JSON = b"{ invalid json"
EMPTY_RESPONSE = b""
EMPTY_OBJECT = b"{}"
EMPTY_ARRAY = b"[]"


# ============================================================================
# Credentials
# ============================================================================

BYBIT_CREDENTIALS = Credentials(api_key="test-bybit-key", api_secret="test-bybit-secret")
KUCOIN_CREDENTIALS = Credentials(
    api_key="test-kucoin-key",
    api_secret="test-kucoin-secret",
    passphrase="test-passphrase"
)
BINANCE_CREDENTIALS = Credentials(api_key="test-binance-key", api_secret="test-binance-secret")
