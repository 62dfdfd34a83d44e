"""
Balance polling module.
"""

from .poller import BalancePoller, PollingConfig, PollingState

__all__ = [
    "BalancePoller",
    "PollingConfig",
    "PollingState"
]
