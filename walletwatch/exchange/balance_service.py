"""
Wallet balance fetch pipeline.

build signed request -> send -> detect errors -> parse

Each stage short-circuits the rest. Nothing is retried here; retrying is
the poller's job.
"""

from typing import Union

from .credentials import CredentialProvider
from .error_detectors import detector_for
from .error_mapper import map_network_error
from .exceptions import InvalidRequestError, NoDataError, TransportError
from .exchange_config import ExchangeName, ExchangeSelector, WalletType
from .models import WalletSnapshot
from .parsers import parser_for
from .request_builders import build_request_for
from .transport import Transport
from ..utils.logger import get_logger


logger = get_logger(__name__)


class BalanceService:
    """
    Fetches normalized wallet balances from supported exchanges.

    Holds no per-call state, so one instance can serve concurrent fetches
    for different selectors.
    """

    def __init__(
        self,
        credential_provider: CredentialProvider,
        transport: Transport,
        testnet: bool = False
    ):
        """
        Initialize balance service.

        Args:
            credential_provider: Source of API credentials
            transport: HTTP transport used to send requests
            testnet: Use testnet endpoints where the exchange has them
        """
        self.credential_provider = credential_provider
        self.transport = transport
        self.testnet = testnet

    async def fetch_wallet_balance(self, selector: ExchangeSelector) -> WalletSnapshot:
        """
        Fetch and parse the wallet balance for one exchange/wallet.

        Args:
            selector: Exchange and wallet type to query

        Returns:
            WalletSnapshot

        Raises:
            InvalidRequestError: If the request could not be built
            NoDataError: If a successful response has an empty body
            APIDomainError: If the exchange or the network reported a failure
            ParseError: If a successful response could not be read
        """
        request = await build_request_for(selector, self.credential_provider, testnet=self.testnet)
        if request is None:
            raise InvalidRequestError(f"Could not build request for {selector}")

        endpoint = request.url.split("?")[0]
        logger.debug("Fetching wallet balance", exchange=str(selector), endpoint=endpoint)

        try:
            response = await self.transport.send(request.method, request.url, request.headers)
        except TransportError as e:
            logger.warning("Transport failure", exchange=str(selector), error=str(e))
            raise map_network_error(e, selector, endpoint) from e

        detector_for(selector, endpoint).detect(response.body, response)

        if not response.body:
            raise NoDataError()

        snapshot = parser_for(selector).parse(response.body)

        logger.debug(
            "Wallet balance fetched",
            exchange=str(selector),
            total_equity=str(snapshot.total_equity),
            wallet_balance=str(snapshot.wallet_balance)
        )
        return snapshot

    async def fetch_balance(
        self,
        exchange: Union[ExchangeName, str],
        wallet: Union[WalletType, str]
    ) -> WalletSnapshot:
        """
        Fetch a wallet balance by exchange and wallet name.

        Example:
            >>> await service.fetch_balance("bybit", "unified")
        """
        return await self.fetch_wallet_balance(ExchangeSelector.make(exchange, wallet))
