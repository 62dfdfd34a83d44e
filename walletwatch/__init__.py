"""
WalletWatch

Multi-exchange wallet balance monitor for Bybit, KuCoin and Binance
with signed REST requests, normalized error reporting and polling.
"""

__version__ = "0.1.0"
__author__ = "WalletWatch Team"
