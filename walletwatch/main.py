"""
Main entry point for WalletWatch.

Loads configuration, then polls the balance of every configured
exchange wallet until interrupted.
"""

import asyncio
import argparse
import json
import signal
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .exchange.balance_service import BalanceService
from .exchange.credentials import EnvCredentialProvider
from .exchange.exceptions import APIDomainError
from .exchange.exchange_config import ExchangeSelector
from .exchange.models import WalletSnapshot
from .exchange.transport import AiohttpTransport
from .polling.poller import BalancePoller, PollingConfig
from .utils.logger import EventType, log_balance_event, log_system_event, setup_logger


DEFAULT_INTERVAL_SECONDS = 60.0


class WalletMonitor:
    """Coordinates one balance poller per configured account."""

    def __init__(self, config_path: str):
        """
        Initialize the monitor.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = config_path
        self.config = self._load_config()
        self.logger = setup_logger(
            log_level=self.config.get("logging", {}).get("level", "INFO"),
            log_dir=self.config.get("logging", {}).get("log_dir", "logs"),
            log_format=self.config.get("logging", {}).get("format", "json"),
            service_name="walletwatch"
        )

        exchange_config = self.config.get("exchange", {})
        self.testnet = exchange_config.get("testnet", False)
        self.transport = AiohttpTransport(timeout=exchange_config.get("timeout_seconds", 10.0))
        self.service = BalanceService(
            EnvCredentialProvider(prefix=self.config.get("credentials", {}).get("env_prefix", "")),
            self.transport,
            testnet=self.testnet
        )

        self.selectors = self._load_selectors()
        self.pollers: Dict[ExchangeSelector, BalancePoller] = {}
        self.running = False

    def _load_config(self) -> dict:
        """Load configuration from JSON file."""
        config_file = Path(self.config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(config_file, 'r') as f:
            return json.load(f)

    def _load_selectors(self) -> List[ExchangeSelector]:
        selectors = []
        for account in self.config.get("polling", {}).get("accounts", []):
            selector = ExchangeSelector.make(account["exchange"], account["wallet"])
            if not selector.is_supported:
                self.logger.warning(
                    "Skipping unsupported wallet",
                    exchange=selector.display_name,
                    wallet=selector.wallet_type.value
                )
                continue
            selectors.append(selector)
        return selectors

    def _interval(self) -> float:
        return float(self.config.get("polling", {}).get("interval_seconds", DEFAULT_INTERVAL_SECONDS))

    def _on_update(self, selector: ExchangeSelector) -> Callable[[WalletSnapshot], None]:
        def handle(snapshot: WalletSnapshot) -> None:
            log_balance_event(
                self.logger,
                EventType.BALANCE_UPDATED,
                str(selector),
                total_equity=str(snapshot.total_equity),
                wallet_balance=str(snapshot.wallet_balance),
                maintenance_margin=str(snapshot.maintenance_margin),
                maintenance_margin_pct=snapshot.maintenance_margin_percentage_formatted()
            )
        return handle

    def _on_error(self, selector: ExchangeSelector) -> Callable[[Exception], None]:
        def handle(error: Exception) -> None:
            self._log_error(selector, error)
        return handle

    def _log_error(self, selector: ExchangeSelector, error: Exception) -> None:
        if isinstance(error, APIDomainError):
            self.logger.warning(
                EventType.API_ERROR,
                event_type=EventType.API_ERROR,
                exchange=str(selector),
                kind=error.kind.value,
                status=error.http_status,
                code=error.api_code,
                message=error.user_message
            )
            return

        self.logger.warning(
            EventType.BALANCE_FETCH_FAILED,
            event_type=EventType.BALANCE_FETCH_FAILED,
            exchange=str(selector),
            error=str(error),
            error_type=type(error).__name__
        )

    async def fetch_once(self) -> Dict[ExchangeSelector, Union[WalletSnapshot, Exception]]:
        """Fetch every configured wallet once, concurrently."""
        results = await asyncio.gather(
            *(self.service.fetch_wallet_balance(s) for s in self.selectors),
            return_exceptions=True
        )

        outcome = {}
        for selector, result in zip(self.selectors, results):
            if isinstance(result, Exception):
                self._log_error(selector, result)
            else:
                self._on_update(selector)(result)
            outcome[selector] = result
        return outcome

    async def start(self) -> None:
        """Start one poller per account and run until they all finish."""
        self.running = True
        log_system_event(
            self.logger,
            EventType.STARTUP,
            "WalletWatch starting",
            config_path=self.config_path,
            testnet=self.testnet,
            accounts=[str(s) for s in self.selectors]
        )

        try:
            for selector in self.selectors:
                poller = BalancePoller(
                    lambda s=selector: self.service.fetch_wallet_balance(s),
                    max_attempts=self.config.get("polling", {}).get("max_attempts", 5),
                    name=str(selector)
                )
                poller.start(PollingConfig(
                    frequency_provider=self._interval,
                    should_continue=lambda: self.running,
                    on_update=self._on_update(selector),
                    on_error=self._on_error(selector)
                ))
                self.pollers[selector] = poller

            await asyncio.gather(*(p.wait() for p in self.pollers.values()))

        except Exception as e:
            self.logger.error(
                "critical_error",
                error=str(e),
                error_type=type(e).__name__
            )
            raise
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Stop all pollers and close the HTTP session."""
        if self.running:
            self.running = False
            log_system_event(
                self.logger,
                EventType.SHUTDOWN,
                "WalletWatch shutting down gracefully"
            )

        for poller in self.pollers.values():
            poller.stop()

        await self.transport.close()

    def handle_signal(self, signum, frame) -> None:
        """Handle shutdown signals (Ctrl+C)."""
        self.logger.warning("shutdown_signal_received", signal=signum)
        self.running = False
        for poller in self.pollers.values():
            poller.stop()


async def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Multi-exchange wallet balance monitor"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch every wallet once and exit"
    )
    args = parser.parse_args(argv)

    monitor = WalletMonitor(args.config)

    if args.once:
        try:
            await monitor.fetch_once()
        finally:
            await monitor.shutdown()
        return

    # Setup signal handlers for graceful shutdown
    signal.signal(signal.SIGINT, monitor.handle_signal)
    signal.signal(signal.SIGTERM, monitor.handle_signal)

    await monitor.start()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
