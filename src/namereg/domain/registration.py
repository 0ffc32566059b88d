"""
Registration process - Two-phase commit state machine for a single name.

Claiming a name takes two transactions so that nobody watching the
network can front-run the claim:

1. commit (name_new): stakes the claim, returns a transaction id and a
   secret ("rand") without revealing the name
2. reveal (name_firstupdate): publishes name, secret and value, but only
   once the commit has FIRSTUPDATE_DELAY confirmations

State Machine (Forward-Only Transitions)
========================================

States:
- NOT_STARTED: Fresh object, no remote side effects yet
- RESERVED: Commit transaction submitted, value not yet published
- FINALIZED: Reveal transaction submitted (saved as "activated")

Valid Transitions:
    NOT_STARTED -> RESERVED   (register)
    RESERVED -> FINALIZED     (finalize, after enough confirmations)

Every transition performs its remote call first and flips the local
state last, so a failed call leaves the object exactly as it was.
"""

import json
import logging
from typing import Any

from .exceptions import InvalidStateError, NameAlreadyReserved, RecordFormatError
from .ports import NameRpc, ProcessState
from .records import ActivatedRecord, ProcessRecord, ReservedRecord

logger = logging.getLogger(__name__)

# Confirmations required on the commit before the reveal may be issued.
FIRSTUPDATE_DELAY = 12


class RegistrationProcess:
    """
    Registration process of a single name.

    Holds the data needed to issue the reveal after the commit has
    matured, and can be saved to and restored from a ProcessRecord so
    the process survives restarts.
    """

    def __init__(self, rpc: NameRpc) -> None:
        self._rpc = rpc
        self._state = ProcessState.NOT_STARTED
        self._name: str | None = None
        self._value = ""
        self._rand: str | None = None
        self._tx: str | None = None
        self._tx_activation: str | None = None

    def __repr__(self) -> str:
        return f"RegistrationProcess(name={self._name!r}, state={self._state.value})"

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def value(self) -> str:
        return self._value

    @property
    def commit_tx(self) -> str | None:
        return self._tx

    @property
    def commit_secret(self) -> str | None:
        return self._rand

    @property
    def reveal_tx(self) -> str | None:
        return self._tx_activation

    def register(self, name: str) -> None:
        """
        Start registration by issuing the commit transaction.

        Args:
            name: The name to claim

        Raises:
            InvalidStateError: If not in NOT_STARTED state
            NameAlreadyReserved: If the name is owned and not expired
            RpcError: If a remote call fails (state stays NOT_STARTED)
        """
        if self._state != ProcessState.NOT_STARTED:
            raise InvalidStateError("Can register() only in NOT_STARTED state.")

        if self._rpc.lookup(name).is_claimed:
            raise NameAlreadyReserved(name)

        commitment = self._rpc.commit(name)

        self._name = name
        self._tx = commitment.tx
        self._rand = commitment.rand
        self._value = ""
        # State flips last so any failure above leaves us untouched.
        self._state = ProcessState.RESERVED
        logger.info("Committed name %s in tx %s", name, commitment.tx)

    def set_value(self, value: str) -> None:
        """
        Set the value to publish with the reveal.

        Raises:
            InvalidStateError: If not in RESERVED state
        """
        if self._state != ProcessState.RESERVED:
            raise InvalidStateError("Can set_value() only in RESERVED state.")
        self._value = value

    def set_json_value(self, data: Any) -> None:
        """Set the value from a JSON-serializable structure."""
        self.set_value(json.dumps(data, separators=(",", ":"), ensure_ascii=False))

    def can_finalize(self) -> bool:
        """
        Check whether the reveal transaction may be issued now.

        Returns:
            True iff RESERVED and the commit has enough confirmations

        Raises:
            RpcError: If the confirmation count cannot be determined
        """
        if self._state != ProcessState.RESERVED:
            return False
        return self._rpc.confirmations(self._tx) >= FIRSTUPDATE_DELAY

    def finalize(self) -> None:
        """
        Issue the reveal transaction.

        Raises:
            InvalidStateError: If not RESERVED or not yet mature
            RpcError: If a remote call fails (state stays RESERVED)
        """
        if self._state != ProcessState.RESERVED:
            raise InvalidStateError("Can finalize() only in RESERVED state.")
        if not self.can_finalize():
            raise InvalidStateError("Can't finalize yet, please wait longer.")

        tx_activation = self._rpc.reveal(self._name, self._rand, self._tx, self._value)

        self._tx_activation = tx_activation
        self._state = ProcessState.FINALIZED
        logger.info("Finalized name %s in tx %s", self._name, tx_activation)

    def is_settled(self) -> bool:
        """
        Check whether the registration is finished for good.

        Returns:
            True iff FINALIZED and the reveal has at least one confirmation
        """
        if self._state != ProcessState.FINALIZED:
            return False
        return self._rpc.confirmations(self._tx_activation) > 0

    def snapshot(self) -> ProcessRecord:
        """
        Capture the durable state of this process.

        Raises:
            InvalidStateError: In NOT_STARTED state (nothing to save)
        """
        if self._state == ProcessState.RESERVED:
            return ReservedRecord(name=self._name, value=self._value, rand=self._rand, tx=self._tx)
        if self._state == ProcessState.FINALIZED:
            return ActivatedRecord(
                name=self._name,
                value=self._value,
                rand=self._rand,
                tx=self._tx,
                tx_activation=self._tx_activation,
            )
        raise InvalidStateError("Can't save a registration that was not started.")

    @classmethod
    def restore(cls, rpc: NameRpc, record: ProcessRecord) -> "RegistrationProcess":
        """
        Rebuild a process from a saved record.

        Raises:
            RecordFormatError: If the record is not a known variant
        """
        if isinstance(record, ActivatedRecord):
            state = ProcessState.FINALIZED
            tx_activation = record.tx_activation
        elif isinstance(record, ReservedRecord):
            state = ProcessState.RESERVED
            tx_activation = None
        else:
            raise RecordFormatError(f"Unknown registration record: {type(record).__name__}")

        process = cls(rpc)
        process._name = record.name
        process._value = record.value
        process._rand = record.rand
        process._tx = record.tx
        process._tx_activation = tx_activation
        process._state = state
        return process
