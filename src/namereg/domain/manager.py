"""
Registration manager - Bulk driver for many registration processes.

Keeps an insertion-ordered list of RegistrationProcess objects sharing one
RPC connection, and advances, cleans up, saves and restores all of them
at once.

Name uniqueness across the list is not enforced: two
independent claims for the same name may be in flight at the same time.
"""

import logging
from collections.abc import Iterator

from .exceptions import BatchError
from .ports import NameRpc
from .records import ManagerRecord
from .registration import RegistrationProcess

logger = logging.getLogger(__name__)


class RegistrationManager:
    """Ordered collection of registration processes."""

    def __init__(self, rpc: NameRpc) -> None:
        self._rpc = rpc
        self._processes: list[RegistrationProcess] = []

    def __iter__(self) -> Iterator[RegistrationProcess]:
        return iter(self._processes)

    def __len__(self) -> int:
        return len(self._processes)

    @property
    def processes(self) -> tuple[RegistrationProcess, ...]:
        return tuple(self._processes)

    def start_registration(self, name: str) -> RegistrationProcess:
        """
        Start registration of a new name.

        The process is only inserted once its commit succeeded, so a
        failure leaves the collection unchanged.

        Returns:
            The new process, so the caller can set its value

        Raises:
            NameAlreadyReserved: If the name is owned and not expired
            RpcError: If a remote call fails
        """
        process = RegistrationProcess(self._rpc)
        process.register(name)
        self._processes.append(process)
        return process

    def advance_all(self, *, fail_fast: bool = False) -> list[RegistrationProcess]:
        """
        Finalize every process that is ready, in insertion order.

        By default every entry is attempted; failures are collected and
        raised together as a BatchError once the pass is complete. With
        fail_fast the first failure propagates immediately. Either way,
        processes finalized before the failure stay FINALIZED.

        Returns:
            The processes finalized during this pass

        Raises:
            BatchError: If any entry failed (continue mode)
        """
        finalized: list[RegistrationProcess] = []
        failures: list[tuple[str, Exception]] = []

        for process in self._processes:
            try:
                if process.can_finalize():
                    process.finalize()
                    finalized.append(process)
            except Exception as e:
                if fail_fast:
                    raise
                logger.warning("Could not finalize %s: %s", process.name, e)
                failures.append((process.name, e))

        if failures:
            raise BatchError(failures, finalized=finalized)
        return finalized

    def clean_up(self, *, fail_fast: bool = False) -> int:
        """
        Remove settled processes, keeping the order of the rest.

        Entries whose status cannot be determined are kept. Error
        handling follows advance_all().

        Returns:
            Number of processes removed

        Raises:
            BatchError: If any status check failed (continue mode)
        """
        kept: list[RegistrationProcess] = []
        failures: list[tuple[str, Exception]] = []

        for index, process in enumerate(self._processes):
            try:
                settled = process.is_settled()
            except Exception as e:
                if fail_fast:
                    # Drop what was found settled so far, keep the rest.
                    self._processes = kept + self._processes[index:]
                    raise
                logger.warning("Could not check %s: %s", process.name, e)
                failures.append((process.name, e))
                settled = False
            if not settled:
                kept.append(process)

        removed = len(self._processes) - len(kept)
        self._processes = kept
        if removed:
            logger.info("Removed %d finished registration(s)", removed)

        if failures:
            raise BatchError(failures, removed=removed)
        return removed

    def snapshot(self) -> ManagerRecord:
        """
        Capture the durable state of all processes.

        Raises:
            InvalidStateError: If a process was never started
        """
        return ManagerRecord(elements=tuple(p.snapshot() for p in self._processes))

    def restore(self, record: ManagerRecord) -> None:
        """
        Replace all processes with those saved in the record.

        The new list is built completely before the old one is replaced,
        so a failure leaves the current collection untouched.

        Raises:
            RecordFormatError: If any element cannot be restored
        """
        processes = [RegistrationProcess.restore(self._rpc, element) for element in record.elements]
        self._processes = processes
