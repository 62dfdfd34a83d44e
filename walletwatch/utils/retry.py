"""
Exponential backoff bookkeeping for retry loops.
"""

from .logger import get_logger

logger = get_logger(__name__)


class Backoff:
    """
    Bounded exponential backoff.

    delay = base_delay * factor ** attempts

    Owned by a single loop; not safe to share between tasks.

    Example:
        backoff = Backoff(max_attempts=5)
        while True:
            try:
                await fetch()
                backoff.reset()
            except Exception:
                if backoff.record_failure():
                    break
                await asyncio.sleep(backoff.delay)
    """

    DEFAULT_BASE_DELAY = 1.0  # seconds
    DEFAULT_FACTOR = 2
    DEFAULT_MAX_ATTEMPTS = 5

    def __init__(
        self,
        base_delay: float = DEFAULT_BASE_DELAY,
        factor: int = DEFAULT_FACTOR,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS
    ):
        """
        Initialize backoff.

        Args:
            base_delay: Delay after a success, in seconds (default: 1)
            factor: Multiplier applied per failed attempt (default: 2)
            max_attempts: Consecutive failures before giving up (default: 5)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.base_delay = base_delay
        self.factor = factor
        self.max_attempts = max_attempts
        self.attempts = 0
        self.delay = base_delay

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def reset(self) -> None:
        """Clear the failure count and restore the base delay."""
        self.attempts = 0
        self.delay = self.base_delay

    def record_failure(self) -> bool:
        """
        Count a failed attempt and grow the delay.

        Returns:
            True if the attempt budget is used up
        """
        self.attempts += 1

        if self.exhausted:
            logger.error(
                "max_retries_exceeded",
                attempts=self.attempts,
                max_attempts=self.max_attempts
            )
            return True

        self.delay = self.delay * self.factor
        logger.warning(
            "retrying_after_error",
            attempt=self.attempts,
            max_attempts=self.max_attempts,
            delay_seconds=self.delay
        )
        return False
