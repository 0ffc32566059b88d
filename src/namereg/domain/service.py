"""
Registration domain service - Checkpointed batches over the manager.

Each externally triggered operation (one API request, one scheduled job)
runs as a batch: load the manager from the checkpoint store, apply the
operation, save the checkpoint. The save happens even when the operation
raised, so every step that did succeed remotely is durable.
"""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from .manager import RegistrationManager
from .ports import CheckpointStore, NameRpc, ProcessState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessStatus:
    """Read-only view of one registration for display."""

    name: str
    state: ProcessState
    can_finalize: bool | None = None
    settled: bool | None = None


@dataclass
class RegistrationService:
    """
    Domain service for name registration.

    Orchestrates the registration manager and its checkpoint store.
    """

    rpc: NameRpc
    store: CheckpointStore

    @contextmanager
    def batch(self) -> Iterator[RegistrationManager]:
        """
        Load the manager, yield it, and always checkpoint afterwards.

        Yields:
            RegistrationManager restored from the last checkpoint
        """
        manager = RegistrationManager(self.rpc)
        record = self.store.load()
        if record is not None:
            manager.restore(record)
        try:
            yield manager
        finally:
            self.store.save(manager.snapshot())
            logger.info("Checkpoint saved with %d registration(s)", len(manager))

    def register(self, name: str, value: str = "") -> ProcessStatus:
        """
        Start registration of a name and set its value.

        Raises:
            NameAlreadyReserved: If the name is owned and not expired
            RpcError: If a remote call fails
        """
        with self.batch() as manager:
            process = manager.start_registration(name)
            process.set_value(value)
            return ProcessStatus(name=process.name, state=process.state)

    def register_many(self, names: Iterable[str], value: str = "") -> list[ProcessStatus]:
        """
        Start registration of several names with the same value.

        Stops at the first failure; names registered before it are kept
        in the checkpoint.
        """
        started: list[ProcessStatus] = []
        with self.batch() as manager:
            for name in names:
                process = manager.start_registration(name)
                process.set_value(value)
                started.append(ProcessStatus(name=process.name, state=process.state))
        return started

    def advance(self, *, fail_fast: bool = False) -> list[str]:
        """
        Finalize all registrations that are ready.

        Returns:
            Names finalized in this batch

        Raises:
            BatchError: If some entries failed (already-finalized ones are saved)
        """
        with self.batch() as manager:
            finalized = manager.advance_all(fail_fast=fail_fast)
        return [process.name for process in finalized]

    def clean_up(self) -> int:
        """Remove settled registrations and return how many were removed."""
        with self.batch() as manager:
            return manager.clean_up()

    def status(self) -> list[ProcessStatus]:
        """
        Describe every tracked registration.

        Read-only: the checkpoint is loaded but not written.
        """
        manager = RegistrationManager(self.rpc)
        record = self.store.load()
        if record is not None:
            manager.restore(record)

        result: list[ProcessStatus] = []
        for process in manager:
            if process.state == ProcessState.RESERVED:
                result.append(
                    ProcessStatus(process.name, process.state, can_finalize=process.can_finalize())
                )
            else:
                result.append(ProcessStatus(process.name, process.state, settled=process.is_settled()))
        return result
