"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .records import ManagerRecord


class ProcessState(str, Enum):
    """
    Registration process states.

    State Transitions (forward-only):
    - NOT_STARTED -> RESERVED (commit transaction submitted)
    - RESERVED -> FINALIZED (reveal transaction submitted)

    The values double as the persisted state tags; FINALIZED is saved
    as "activated".
    """

    NOT_STARTED = "not_started"
    RESERVED = "reserved"
    FINALIZED = "activated"


@dataclass(frozen=True)
class Commitment:
    """Result of the commit-phase call: transaction id plus secret."""

    tx: str
    rand: str


@dataclass(frozen=True)
class NameStatus:
    """Result of a name lookup."""

    exists: bool
    expired: bool = False

    @property
    def is_claimed(self) -> bool:
        """True iff the name is owned and not yet expired."""
        return self.exists and not self.expired


class NameRpc(Protocol):
    """Port interface for the naming service RPC."""

    def commit(self, name: str) -> Commitment:
        """
        Issue the commit-phase transaction for a name.

        Raises:
            NameAlreadyReserved: If the remote reports the name as taken
            RpcError: On transport or remote failure
        """
        ...

    def reveal(self, name: str, rand: str, tx: str, value: str) -> str:
        """
        Issue the reveal-phase transaction.

        Returns:
            Transaction id of the reveal
        """
        ...

    def confirmations(self, txid: str) -> int:
        """
        Return the confirmation count of a transaction.

        Raises:
            UnknownTransaction: If the transaction id is not found
        """
        ...

    def lookup(self, name: str) -> NameStatus:
        """Look up whether a name exists and whether it has expired."""
        ...


class CheckpointStore(Protocol):
    """Port interface for durable manager checkpoints."""

    def load(self) -> ManagerRecord | None:
        """
        Load the last saved checkpoint.

        Returns:
            The saved record, or None if nothing was saved yet

        Raises:
            RecordFormatError: If the stored document is not a valid record
        """
        ...

    def save(self, record: ManagerRecord) -> None:
        """Persist a checkpoint, replacing the previous one."""
        ...
