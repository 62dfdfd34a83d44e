"""
Balance polling driver.

Runs one cooperative loop per poller: sleep for the configured interval,
re-check the guard, fetch, report. Consecutive failures back off
exponentially and the loop gives up after max_attempts of them.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from ..exchange.models import WalletSnapshot
from ..utils.logger import EventType, get_logger, log_system_event
from ..utils.retry import Backoff


logger = get_logger(__name__)


def _always() -> bool:
    return True


def _ignore(_) -> None:
    return None


@dataclass
class PollingConfig:
    """
    Callbacks driving a polling run.

    frequency_provider is queried every cycle, so the interval can change
    while the poller runs.
    """
    frequency_provider: Callable[[], float]
    should_continue: Callable[[], bool] = _always
    on_update: Callable[[WalletSnapshot], None] = _ignore
    on_error: Callable[[Exception], None] = _ignore


class PollingState(Enum):
    """Poller lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    EXHAUSTED = "exhausted"


class BalancePoller:
    """
    Polls a fetch handler on an interval.

    Features:
    - Interval re-read every cycle
    - Guard predicate re-checked after each sleep
    - Exponential backoff on failure (1s, doubling)
    - Terminal EXHAUSTED state after max_attempts consecutive failures
    - Never overlaps fetches
    """

    def __init__(
        self,
        fetch_handler: Callable[[], Awaitable[WalletSnapshot]],
        config: Optional[PollingConfig] = None,
        max_attempts: int = Backoff.DEFAULT_MAX_ATTEMPTS,
        base_delay: float = Backoff.DEFAULT_BASE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        name: str = "balance"
    ):
        """
        Initialize poller.

        Args:
            fetch_handler: Coroutine function returning a WalletSnapshot
            config: Default callbacks used by start()
            max_attempts: Consecutive failures before giving up
            base_delay: Backoff delay in seconds after a success
            sleep: Sleep coroutine (injectable for tests)
            name: Label used in log records
        """
        self.fetch_handler = fetch_handler
        self.config = config
        self.name = name
        self._sleep = sleep
        self._backoff = Backoff(base_delay=base_delay, max_attempts=max_attempts)
        self._task: Optional[asyncio.Task] = None
        self._state = PollingState.IDLE

    @property
    def state(self) -> PollingState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == PollingState.RUNNING

    @property
    def reconnection_attempts(self) -> int:
        return self._backoff.attempts

    @property
    def reconnection_delay(self) -> float:
        return self._backoff.delay

    def start(self, config: Optional[PollingConfig] = None) -> None:
        """
        Start polling, replacing any run in progress.

        Must be called from a running event loop.

        Args:
            config: Callbacks for this run (defaults to the constructor config)

        Raises:
            ValueError: If no config was given here or at construction
        """
        if config is not None:
            self.config = config
        if self.config is None:
            raise ValueError("PollingConfig is required to start polling")

        self.stop()

        self._backoff.reset()
        self._state = PollingState.RUNNING
        self._task = asyncio.create_task(self._run(self.config))

        log_system_event(
            logger,
            EventType.POLLING_STARTED,
            "Polling started",
            poller=self.name,
            max_attempts=self._backoff.max_attempts
        )

    def stop(self) -> None:
        """Cancel the current run. Safe to call in any state."""
        task = self._task
        self._task = None

        if task is not None and not task.done():
            task.cancel()

        if self._state == PollingState.RUNNING:
            self._state = PollingState.STOPPED
            self._backoff.reset()
            log_system_event(
                logger,
                EventType.POLLING_STOPPED,
                "Polling stopped",
                poller=self.name
            )

    async def wait(self) -> None:
        """Wait until the current run finishes (stopped, exhausted or guard false)."""
        task = self._task
        if task is not None:
            await asyncio.wait({task})

    def _notify(self, callback: Callable, value) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Polling callback failed", poller=self.name)

    async def _run(self, config: PollingConfig) -> None:
        try:
            while self._state == PollingState.RUNNING and config.should_continue():
                await self._sleep(config.frequency_provider())

                # The guard may have changed while sleeping
                if self._state != PollingState.RUNNING or not config.should_continue():
                    break

                try:
                    snapshot = await self.fetch_handler()
                except Exception as e:
                    logger.warning(
                        "Balance fetch failed",
                        poller=self.name,
                        error=str(e),
                        error_type=type(e).__name__,
                        attempt=self._backoff.attempts + 1
                    )
                    self._notify(config.on_error, e)

                    if self._backoff.record_failure():
                        self._state = PollingState.EXHAUSTED
                        log_system_event(
                            logger,
                            EventType.POLLING_EXHAUSTED,
                            "Polling gave up after repeated failures",
                            poller=self.name,
                            attempts=self._backoff.attempts
                        )
                        return

                    await self._sleep(self._backoff.delay)
                    continue

                self._backoff.reset()
                self._notify(config.on_update, snapshot)

            if self._state == PollingState.RUNNING:
                self._state = PollingState.STOPPED
                logger.info("Polling guard returned false", poller=self.name)

        except asyncio.CancelledError:
            # Cancelled from outside stop(); a restart already owns the state
            if self._task is asyncio.current_task():
                self._state = PollingState.STOPPED
                self._task = None
            raise
        except Exception:
            logger.exception("Polling loop crashed", poller=self.name)
            if self._task is asyncio.current_task():
                self._state = PollingState.STOPPED
                self._task = None
