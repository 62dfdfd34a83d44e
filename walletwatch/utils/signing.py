"""
HMAC-SHA256 signing helpers shared by all request builders.
"""

import base64
import hashlib
import hmac
import string
import time


_HEX_DIGITS = set(string.hexdigits)


def hmac_sha256_hex(message: str, key: str) -> str:
    """
    Sign a message with HMAC-SHA256.

    Args:
        message: Payload to sign (UTF-8 encoded)
        key: Secret key (UTF-8 encoded)

    Returns:
        64-character lowercase hex digest
    """
    return hmac.new(
        key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def hex_to_bytes(hex_string: str) -> bytes:
    """
    Convert a hex string to bytes, two characters per byte.

    Never raises: a trailing odd character is dropped and pairs that are
    not valid hex are skipped.

    Example:
        >>> hex_to_bytes("48zz69")
        b'Hi'
    """
    result = bytearray()
    for i in range(0, len(hex_string) - 1, 2):
        pair = hex_string[i:i + 2]
        if pair[0] in _HEX_DIGITS and pair[1] in _HEX_DIGITS:
            result.append(int(pair, 16))
    return bytes(result)


def bytes_to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def hex_to_base64(hex_string: str) -> str:
    """Re-encode a hex digest as base64 (KuCoin signature format)."""
    return bytes_to_base64(hex_to_bytes(hex_string))


def current_timestamp_ms() -> str:
    """Milliseconds since epoch as a decimal string."""
    return str(int(time.time() * 1000))
