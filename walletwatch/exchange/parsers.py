"""
Wallet balance parsers converting exchange JSON bodies to WalletSnapshot.

Parsing is all-or-nothing: a parser either builds a complete snapshot or
returns None. `parse` turns None into a ParseError.
"""

import json
from collections import defaultdict
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from .exceptions import ParseError
from .exchange_config import ExchangeName, ExchangeSelector, WalletType
from .models import (
    KuCoinAccount,
    KuCoinAggregatedBalance,
    WalletSnapshot,
    to_decimal
)
from ..utils.logger import get_logger


logger = get_logger(__name__)

_EIGHT_PLACES = Decimal("0.00000001")
_ZERO = Decimal("0")

# KuCoin spot valuation. Placeholder rates, not a price feed.
KUCOIN_STABLECOINS = {"USDT", "USDC", "TUSD", "BUSD"}
KUCOIN_ESTIMATED_RATES = {
    "BTC": Decimal("40000"),
    "ETH": Decimal("2000"),
}
KUCOIN_OTHER_ASSET_FACTOR = Decimal("0.1")


def _load_json(data: Union[bytes, str]) -> Any:
    try:
        return json.loads(data)
    except (ValueError, TypeError) as e:
        logger.debug("Response body is not valid JSON", error=str(e))
        return None


def _number_as_decimal(value: Any) -> Optional[Decimal]:
    """
    Normalize a numeric string or JSON number.

    JSON numbers become 8-decimal fixed point; strings are kept as sent.
    Empty strings, bools and non-numeric values give None.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, str):
            if not value.strip():
                return None
            return to_decimal(value.strip())
        if isinstance(value, (int, float)):
            return to_decimal(value).quantize(_EIGHT_PLACES)
    except InvalidOperation:
        return None
    return None


def _first_number(source: Dict[str, Any], *keys: str) -> Optional[Decimal]:
    for key in keys:
        value = _number_as_decimal(source.get(key))
        if value is not None:
            return value
    return None


def _maintenance_margin(value: Any) -> Decimal:
    margin = _number_as_decimal(value)
    return margin if margin is not None else _ZERO


def _sum_amounts(amounts: List[str]) -> Decimal:
    total = _ZERO
    for amount in amounts:
        value = _number_as_decimal(amount)
        if value is not None:
            total += value
    return total


class WalletParser:
    """Base class for wallet balance parsers."""

    name = "wallet"

    def parse_wallet_balance(self, data: Union[bytes, str]) -> Optional[WalletSnapshot]:
        """
        Parse a response body.

        Args:
            data: Raw JSON body

        Returns:
            WalletSnapshot or None if the body does not match
        """
        raise NotImplementedError

    def parse(self, data: Union[bytes, str]) -> WalletSnapshot:
        """
        Parse a response body or fail.

        Raises:
            ParseError: If no snapshot can be built
        """
        snapshot = self.parse_wallet_balance(data)
        if snapshot is None:
            logger.warning("Failed to parse wallet balance", parser=self.name)
            raise ParseError()
        return snapshot


# ============================================================================
# Bybit
# ============================================================================

def _bybit_result(data: Union[bytes, str]) -> Optional[Dict[str, Any]]:
    json_body = _load_json(data)
    if not isinstance(json_body, dict):
        return None
    result = json_body.get("result")
    return result if isinstance(result, dict) else None


def bybit_parse_usdt_from_coins(
    result: Dict[str, Any],
    include_maintenance_margin: bool = True
) -> Optional[WalletSnapshot]:
    """Build a snapshot from the USDT entry of result.list[0].coin[]."""
    accounts = result.get("list")
    if not isinstance(accounts, list) or not accounts or not isinstance(accounts[0], dict):
        return None

    first = accounts[0]
    coins = first.get("coin")
    if not isinstance(coins, list):
        return None

    usdt = next(
        (c for c in coins if isinstance(c, dict) and c.get("coin") == "USDT"),
        None
    )
    if usdt is None:
        return None

    wallet_balance = _first_number(usdt, "walletBalance", "availableToWithdraw")
    if wallet_balance is None:
        wallet_balance = _ZERO
    equity = _number_as_decimal(usdt.get("equity"))
    total_equity = equity if equity is not None else wallet_balance

    margin = _ZERO
    if include_maintenance_margin:
        margin = _maintenance_margin(first.get("totalMaintenanceMargin"))

    return WalletSnapshot(
        total_equity=total_equity,
        wallet_balance=wallet_balance,
        maintenance_margin=margin
    )


def bybit_parse_totals(
    result: Dict[str, Any],
    include_maintenance_margin: bool = True
) -> Optional[WalletSnapshot]:
    """Build a snapshot from result.totalEquity / result.totalWalletBalance."""
    total_equity = _number_as_decimal(result.get("totalEquity"))
    wallet_balance = _number_as_decimal(result.get("totalWalletBalance"))
    if total_equity is None or wallet_balance is None:
        return None

    margin = _ZERO
    if include_maintenance_margin:
        margin = _maintenance_margin(result.get("totalMaintenanceMargin"))

    return WalletSnapshot(
        total_equity=total_equity,
        wallet_balance=wallet_balance,
        maintenance_margin=margin
    )


class BybitSpotWalletParser(WalletParser):
    """Bybit SPOT: coin-level parsing first, totals as fallback."""

    name = "bybit_spot"

    def parse_wallet_balance(self, data: Union[bytes, str]) -> Optional[WalletSnapshot]:
        result = _bybit_result(data)
        if result is None:
            return None
        # Spot has no maintenance margin
        return (
            bybit_parse_usdt_from_coins(result, include_maintenance_margin=False)
            or bybit_parse_totals(result, include_maintenance_margin=False)
        )


class BybitUnifiedWalletParser(WalletParser):
    """Bybit UNIFIED: totals first, coin-level as fallback."""

    name = "bybit_unified"

    def parse_wallet_balance(self, data: Union[bytes, str]) -> Optional[WalletSnapshot]:
        result = _bybit_result(data)
        if result is None:
            return None
        return bybit_parse_totals(result) or bybit_parse_usdt_from_coins(result)


# ============================================================================
# KuCoin
# ============================================================================

_KUCOIN_ACCOUNT_FIELDS = ("id", "currency", "type", "balance", "available", "holds")


def parse_kucoin_accounts(records: List[Any]) -> List[KuCoinAccount]:
    """Keep records where every field is present and a string."""
    accounts = []
    for record in records:
        if not isinstance(record, dict):
            continue
        if not all(isinstance(record.get(f), str) for f in _KUCOIN_ACCOUNT_FIELDS):
            continue
        accounts.append(KuCoinAccount(**{f: record[f] for f in _KUCOIN_ACCOUNT_FIELDS}))
    return accounts


def aggregate_kucoin_balances(accounts: List[KuCoinAccount]) -> List[KuCoinAggregatedBalance]:
    """Group accounts by currency and sum balance and available."""
    grouped: Dict[str, List[KuCoinAccount]] = defaultdict(list)
    for account in accounts:
        grouped[account.currency].append(account)

    aggregated = []
    for currency, currency_accounts in grouped.items():
        total_balance = _sum_amounts([a.balance for a in currency_accounts])
        total_available = _sum_amounts([a.available for a in currency_accounts])
        aggregated.append(KuCoinAggregatedBalance(
            currency=currency,
            total_balance=total_balance,
            total_available=total_available,
            accounts=currency_accounts
        ))
    return aggregated


def estimate_kucoin_portfolio_value(balances: List[KuCoinAggregatedBalance]) -> Decimal:
    """
    Rough USD value of aggregated balances.

    Stablecoins count 1:1, BTC and ETH use fixed rates and everything else
    counts at 10% of its balance.
    """
    total = _ZERO
    for balance in balances:
        if balance.currency in KUCOIN_STABLECOINS:
            total += balance.total_balance
        elif balance.currency in KUCOIN_ESTIMATED_RATES:
            total += balance.total_balance * KUCOIN_ESTIMATED_RATES[balance.currency]
        else:
            logger.debug(
                "Estimating KuCoin asset without a price feed",
                currency=balance.currency,
                balance=str(balance.total_balance)
            )
            total += balance.total_balance * KUCOIN_OTHER_ASSET_FACTOR
    return total


class KuCoinWalletParser(WalletParser):
    """KuCoin spot (accounts list) and futures (account overview)."""

    name = "kucoin"

    def __init__(self, wallet_type: WalletType = WalletType.SPOT):
        self.wallet_type = wallet_type

    def parse_wallet_balance(self, data: Union[bytes, str]) -> Optional[WalletSnapshot]:
        json_body = _load_json(data)
        if not isinstance(json_body, dict):
            return None

        if self.wallet_type == WalletType.SPOT:
            return self.parse_spot(json_body)
        # KuCoin has no unified wallet; both go through the futures overview
        return self.parse_futures(json_body)

    def parse_spot(self, json_body: Dict[str, Any]) -> Optional[WalletSnapshot]:
        records = json_body.get("data")
        if not isinstance(records, list):
            return None

        balances = aggregate_kucoin_balances(parse_kucoin_accounts(records))
        usdt = next((b for b in balances if b.currency == "USDT"), None)

        return WalletSnapshot(
            total_equity=estimate_kucoin_portfolio_value(balances),
            wallet_balance=usdt.total_available if usdt else Decimal("0.00"),
            maintenance_margin=_ZERO
        )

    def parse_futures(self, json_body: Dict[str, Any]) -> Optional[WalletSnapshot]:
        overview = json_body.get("data")
        if isinstance(overview, dict):
            account_equity = _number_as_decimal(overview.get("accountEquity"))
            available_balance = _number_as_decimal(overview.get("availableBalance"))
            currency = overview.get("currency")

            if account_equity is not None and available_balance is not None and isinstance(currency, str):
                margin = _maintenance_margin(overview.get("marginBalance"))
                logger.debug(
                    "Parsed KuCoin futures overview",
                    currency=currency,
                    account_equity=str(account_equity),
                    available_balance=str(available_balance)
                )
                return WalletSnapshot(
                    total_equity=account_equity,
                    wallet_balance=available_balance,
                    maintenance_margin=margin
                )

        # Fallback: some accounts answer with the spot layout
        return self.parse_spot(json_body)


# ============================================================================
# Binance
# ============================================================================

class BinanceWalletParser(WalletParser):
    """
    Binance USDT-M futures account (GET /fapi/v2/account).

    totalMarginBalance = equity (wallet balance + unrealized PnL)
    totalWalletBalance = wallet balance
    totalMaintMargin   = maintenance margin
    """

    name = "binance_futures"

    def parse_wallet_balance(self, data: Union[bytes, str]) -> Optional[WalletSnapshot]:
        json_body = _load_json(data)
        if not isinstance(json_body, dict):
            return None

        total_margin_balance = _number_as_decimal(json_body.get("totalMarginBalance"))
        total_wallet_balance = _number_as_decimal(json_body.get("totalWalletBalance"))
        if total_margin_balance is None or total_wallet_balance is None:
            return None

        return WalletSnapshot(
            total_equity=total_margin_balance,
            wallet_balance=total_wallet_balance,
            maintenance_margin=_maintenance_margin(json_body.get("totalMaintMargin"))
        )


def parser_for(exchange: ExchangeSelector) -> WalletParser:
    """
    Select the parser for an exchange and wallet type.

    Bybit futures uses the unified parser; it has no format of its own.
    """
    if exchange.name == ExchangeName.BYBIT:
        if exchange.wallet_type == WalletType.SPOT:
            return BybitSpotWalletParser()
        return BybitUnifiedWalletParser()

    if exchange.name == ExchangeName.KUCOIN:
        return KuCoinWalletParser(wallet_type=exchange.wallet_type)

    return BinanceWalletParser()
