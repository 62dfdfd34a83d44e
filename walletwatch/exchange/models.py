"""
Normalized data models for exchange-agnostic balance queries.

These models provide a standardized interface across different exchanges,
so callers never handle exchange-specific wallet formats.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Any


_HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric value or numeric string to Decimal.

    Raises:
        InvalidOperation: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidOperation(f"Not a number: {value!r}")
    else:
        result = Decimal(str(value))
    if not result.is_finite():
        raise InvalidOperation(f"Not a finite number: {value!r}")
    return result


@dataclass(frozen=True)
class SignedRequest:
    """
    A ready-to-send HTTP request.

    Built fresh for every call: signatures embed a millisecond timestamp.
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        # Header values include API keys and signatures
        return f"SignedRequest(method={self.method!r}, url={self.url.split('?')[0]!r})"


@dataclass(frozen=True)
class HTTPResponse:
    """Raw HTTP response returned by a transport."""
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: Optional[str] = None

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class WalletSnapshot:
    """
    Normalized wallet balance.

    Only created by a successful parse. Maintenance margin is clamped to be
    non-negative; 0 means not applicable (e.g. spot accounts).
    """
    total_equity: Decimal
    wallet_balance: Decimal
    maintenance_margin: Decimal = Decimal("0")

    def __post_init__(self):
        """Ensure Decimal types for precision."""
        object.__setattr__(self, "total_equity", to_decimal(self.total_equity))
        object.__setattr__(self, "wallet_balance", to_decimal(self.wallet_balance))
        margin = to_decimal(self.maintenance_margin)
        object.__setattr__(self, "maintenance_margin", max(Decimal("0"), margin))

    @property
    def maintenance_margin_percentage(self) -> Decimal:
        """Maintenance margin as a percentage of total equity (0 if equity <= 0)."""
        if self.total_equity <= 0:
            return Decimal("0")
        return self.maintenance_margin / self.total_equity * _HUNDRED

    def maintenance_margin_percentage_formatted(self, decimal_places: int = 2) -> str:
        """Format the percentage, e.g. "5.00%"."""
        return f"{self.maintenance_margin_percentage:.{decimal_places}f}%"


# ============================================================================
# KuCoin spot account models
# ============================================================================

@dataclass(frozen=True)
class KuCoinAccount:
    """A single KuCoin account record ("main", "trade", "margin", ...)."""
    id: str
    currency: str
    type: str
    balance: str
    available: str
    holds: str


@dataclass(frozen=True)
class KuCoinAggregatedBalance:
    """Balances of one currency summed across account records."""
    currency: str
    total_balance: Decimal
    total_available: Decimal
    accounts: List[KuCoinAccount] = field(default_factory=list)
