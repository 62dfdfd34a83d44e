"""
API credentials and credential providers.

Secure storage (keychain, vault) is owned by the embedding application;
it only has to implement CredentialProvider. Two simple providers ship
here: an in-memory one and one reading environment variables.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from .exceptions import CredentialsNotFoundError


@dataclass(frozen=True)
class Credentials:
    """API key, secret and optional passphrase (KuCoin)."""
    api_key: str
    api_secret: str
    passphrase: Optional[str] = None

    def __repr__(self) -> str:
        masked_key = self.api_key[:4] + "..." if self.api_key else ""
        masked_passphrase = "***" if self.passphrase else None
        return (
            f"Credentials(api_key={masked_key!r}, api_secret='***', "
            f"passphrase={masked_passphrase!r})"
        )


class CredentialProvider(ABC):
    """
    Abstract source of API credentials, looked up by account name.

    Implementations may be called concurrently from several fetches and
    must return consistent reads.
    """

    @abstractmethod
    async def get_credentials(self, account: str) -> Credentials:
        """
        Get credentials for an account.

        Args:
            account: Account name (the exchange display name, e.g. "bybit")

        Returns:
            Credentials instance

        Raises:
            CredentialsNotFoundError: If nothing is stored for the account
        """
        pass


class InMemoryCredentialProvider(CredentialProvider):
    """Credential provider backed by a dict."""

    def __init__(self, credentials: Optional[Dict[str, Credentials]] = None):
        self._credentials: Dict[str, Credentials] = dict(credentials or {})

    def set_credentials(self, account: str, credentials: Credentials) -> None:
        self._credentials[account] = credentials

    def delete_credentials(self, account: str) -> None:
        self._credentials.pop(account, None)

    async def get_credentials(self, account: str) -> Credentials:
        try:
            return self._credentials[account]
        except KeyError:
            raise CredentialsNotFoundError(account) from None


class EnvCredentialProvider(CredentialProvider):
    """
    Credential provider reading environment variables.

    For account "kucoin" it reads KUCOIN_API_KEY, KUCOIN_API_SECRET and
    the optional KUCOIN_API_PASSPHRASE.
    """

    def __init__(self, prefix: str = "", environ: Optional[Dict[str, str]] = None):
        self.prefix = prefix
        self._environ = environ if environ is not None else os.environ

    def _var(self, account: str, suffix: str) -> str:
        return f"{self.prefix}{account.upper()}_{suffix}"

    async def get_credentials(self, account: str) -> Credentials:
        api_key = self._environ.get(self._var(account, "API_KEY"))
        api_secret = self._environ.get(self._var(account, "API_SECRET"))

        if not api_key or not api_secret:
            raise CredentialsNotFoundError(account)

        return Credentials(
            api_key=api_key,
            api_secret=api_secret,
            passphrase=self._environ.get(self._var(account, "API_PASSPHRASE")) or None
        )
