"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory naming daemon with a controllable block height
- An in-memory checkpoint store
"""

import itertools

import pytest

from namereg.domain.exceptions import UnknownTransaction
from namereg.domain.ports import Commitment, NameStatus
from namereg.domain.records import ManagerRecord


class FakeNameRpc:
    """
    In-memory stand-in for the naming daemon.

    Every transaction starts with zero confirmations; mine() adds blocks.
    Errors can be injected per method, per reveal name or per txid.
    """

    def __init__(self) -> None:
        self.names: dict[str, NameStatus] = {}
        self.tx_confirmations: dict[str, int] = {}
        self.calls: list[tuple] = []
        self.errors: dict[str, Exception] = {}
        self.reveal_errors: dict[str, Exception] = {}
        self.tx_errors: dict[str, Exception] = {}
        self._counter = itertools.count(1)

    def _record(self, method: str, *args: object) -> None:
        self.calls.append((method, *args))
        error = self.errors.get(method)
        if error is not None:
            raise error

    def calls_to(self, method: str) -> list[tuple]:
        return [call[1:] for call in self.calls if call[0] == method]

    def mine(self, blocks: int = 1) -> None:
        for txid in self.tx_confirmations:
            self.tx_confirmations[txid] += blocks

    def commit(self, name: str) -> Commitment:
        self._record("commit", name)
        n = next(self._counter)
        txid = f"tx-new-{n}"
        self.tx_confirmations[txid] = 0
        return Commitment(tx=txid, rand=f"rand-{n}")

    def reveal(self, name: str, rand: str, tx: str, value: str) -> str:
        self._record("reveal", name, rand, tx, value)
        if name in self.reveal_errors:
            raise self.reveal_errors[name]
        txid = f"tx-update-{next(self._counter)}"
        self.tx_confirmations[txid] = 0
        self.names[name] = NameStatus(exists=True)
        return txid

    def confirmations(self, txid: str) -> int:
        self._record("confirmations", txid)
        if txid in self.tx_errors:
            raise self.tx_errors[txid]
        if txid not in self.tx_confirmations:
            raise UnknownTransaction(-5, "Invalid or non-wallet transaction id")
        return self.tx_confirmations[txid]

    def lookup(self, name: str) -> NameStatus:
        self._record("lookup", name)
        return self.names.get(name, NameStatus(exists=False))


class InMemoryCheckpointStore:
    """Checkpoint store keeping the last record in memory."""

    def __init__(self, record: ManagerRecord | None = None) -> None:
        self.record = record
        self.saves = 0

    def load(self) -> ManagerRecord | None:
        return self.record

    def save(self, record: ManagerRecord) -> None:
        self.record = record
        self.saves += 1


@pytest.fixture
def rpc() -> FakeNameRpc:
    """Fresh fake daemon for each test."""
    return FakeNameRpc()


@pytest.fixture
def store() -> InMemoryCheckpointStore:
    """Empty in-memory checkpoint store."""
    return InMemoryCheckpointStore()
