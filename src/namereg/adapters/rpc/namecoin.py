"""
Namecoin RPC adapter - Implements NameRpc protocol.

Maps the four calls the registration state machine needs onto the
daemon's methods, plus the wallet housekeeping used around batches:

    commit        -> name_new
    reveal        -> name_firstupdate
    confirmations -> gettransaction
    lookup        -> name_show

Uses structural subtyping - no explicit inheritance from Protocol.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from namereg.domain.exceptions import RemoteError, RpcTransportError
from namereg.domain.ports import Commitment, NameStatus

from .errors import RPC_WALLET_ERROR, map_transaction_error, name_taken_error
from .jsonrpc import JsonRpcClient

logger = logging.getLogger(__name__)

# How long the wallet stays unlocked for one batch, in seconds.
UNLOCK_SECONDS = 10


class NamecoinRpc:
    """
    Implements NameRpc protocol against a Namecoin daemon.

    Args:
        client: JSON-RPC client connected to the daemon
    """

    def __init__(self, client: JsonRpcClient) -> None:
        self._client = client

    def commit(self, name: str) -> Commitment:
        """
        Issue name_new for the name.

        Returns:
            Commitment with the transaction id and the secret rand value
        """
        try:
            result = self._client.call("name_new", name)
        except RemoteError as e:
            mapped = name_taken_error(name, e)
            if mapped is e:
                raise
            raise mapped from e

        if not isinstance(result, list) or len(result) != 2:
            raise RpcTransportError(f"Unexpected name_new result: {result!r}")
        return Commitment(tx=str(result[0]), rand=str(result[1]))

    def reveal(self, name: str, rand: str, tx: str, value: str) -> str:
        """Issue name_firstupdate and return its transaction id."""
        try:
            result = self._client.call("name_firstupdate", name, rand, tx, value)
        except RemoteError as e:
            mapped = name_taken_error(name, e)
            if mapped is e:
                raise
            raise mapped from e

        if not isinstance(result, str):
            raise RpcTransportError(f"Unexpected name_firstupdate result: {result!r}")
        return result

    def confirmations(self, txid: str) -> int:
        """
        Query the confirmation count of a wallet transaction.

        Raises:
            UnknownTransaction: If the daemon does not know the txid
        """
        try:
            result = self._client.call("gettransaction", txid)
        except RemoteError as e:
            mapped = map_transaction_error(e)
            if mapped is e:
                raise
            raise mapped from e

        if not isinstance(result, dict) or "confirmations" not in result:
            raise RpcTransportError(f"Unexpected gettransaction result for {txid}")
        return int(result["confirmations"])

    def lookup(self, name: str) -> NameStatus:
        """Query name_show; a missing name is reported, not raised."""
        try:
            data = self._client.call("name_show", name)
        except RemoteError as e:
            if e.code == RPC_WALLET_ERROR:
                return NameStatus(exists=False)
            raise

        # Older daemons report "expired" as 0/1, newer ones as a bool.
        expired = data.get("expired", False) if isinstance(data, dict) else False
        return NameStatus(exists=True, expired=bool(expired))

    def get_info(self) -> dict[str, Any]:
        """Return the daemon's getinfo structure."""
        return self._client.call("getinfo")

    def test_connection(self) -> str:
        """
        Check that the daemon is reachable and describe its version.

        Returns:
            Message like "Daemon version 0.3.80 running."

        Raises:
            RpcError: If the daemon cannot be reached or answers oddly
        """
        info = self.get_info()
        try:
            version = int(info["version"])
        except (KeyError, TypeError, ValueError) as e:
            raise RpcTransportError(f"Unexpected getinfo result: {info!r}") from e
        patch = version % 100
        version //= 100
        minor = version % 100
        version //= 100

        text = f"0.{version}.{minor}"
        if patch > 0:
            text += f".{patch}"
        return f"Daemon version {text} running."

    def needs_wallet_passphrase(self) -> bool:
        """Whether the wallet is locked (or unlocks too soon) for a batch."""
        until = self.get_info().get("unlocked_until")
        if until is None:
            return False
        return int(until) < time.time() + UNLOCK_SECONDS

    @contextmanager
    def unlocked_wallet(self, passphrase: str) -> Iterator[None]:
        """
        Keep the wallet unlocked for the duration of the block.

        Does nothing if the wallet is unencrypted or unlocked long enough.
        Otherwise locks it first (to reset a short timeout), unlocks with
        the passphrase and locks it again on exit.

        Raises:
            WalletPassphraseIncorrect: If the passphrase is wrong
        """
        unlocked = self.needs_wallet_passphrase()
        if unlocked:
            self._client.call("walletlock")
            self._client.call("walletpassphrase", passphrase, UNLOCK_SECONDS)
            logger.info("Wallet unlocked for %d seconds", UNLOCK_SECONDS)
        try:
            yield
        finally:
            if unlocked:
                self._client.call("walletlock")
                logger.info("Wallet locked")
