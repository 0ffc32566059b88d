"""
Unit tests for RegistrationService domain logic.

Tests the checkpointed batches with a fake daemon and an in-memory
store to verify:
- Every batch starts from the saved checkpoint
- The checkpoint is written even when the operation failed
- status() never writes
"""

from unittest.mock import Mock

import pytest

from namereg.domain.exceptions import BatchError, NameAlreadyReserved, RecordFormatError, RemoteError
from namereg.domain.ports import NameStatus, ProcessState
from namereg.domain.records import ActivatedRecord, ManagerRecord, ReservedRecord
from namereg.domain.registration import FIRSTUPDATE_DELAY
from namereg.domain.service import ProcessStatus, RegistrationService


class TestRegister:
    """Tests for register() and register_many()."""

    def test_register_saves_checkpoint(self, rpc, store) -> None:
        """A new registration is saved with its value."""
        service = RegistrationService(rpc=rpc, store=store)

        result = service.register("d/example", '{"ip":"1.2.3.4"}')

        assert result == ProcessStatus(name="d/example", state=ProcessState.RESERVED)
        assert store.saves == 1
        assert store.record == ManagerRecord(
            elements=(
                ReservedRecord(
                    name="d/example", value='{"ip":"1.2.3.4"}', rand="rand-1", tx="tx-new-1"
                ),
            )
        )

    def test_register_appends_to_existing(self, rpc, store) -> None:
        """Earlier registrations are loaded and kept."""
        service = RegistrationService(rpc=rpc, store=store)
        service.register("d/a")
        service.register("d/b")

        assert [e.name for e in store.record.elements] == ["d/a", "d/b"]

    def test_register_failure_still_saves(self, rpc, store) -> None:
        """A refused name leaves the saved state as it was, but rewritten."""
        rpc.names["d/taken"] = NameStatus(exists=True)
        service = RegistrationService(rpc=rpc, store=store)
        service.register("d/a")

        with pytest.raises(NameAlreadyReserved):
            service.register("d/taken")

        assert store.saves == 2
        assert [e.name for e in store.record.elements] == ["d/a"]

    def test_register_many_stops_at_first_failure(self, rpc, store) -> None:
        """Names before the failure are kept, names after it are not tried."""
        rpc.names["d/b"] = NameStatus(exists=True)
        service = RegistrationService(rpc=rpc, store=store)

        with pytest.raises(NameAlreadyReserved):
            service.register_many(["d/a", "d/b", "d/c"], "v")

        assert [e.name for e in store.record.elements] == ["d/a"]
        assert rpc.calls_to("commit") == [("d/a",)]

    def test_register_many_returns_all(self, rpc, store) -> None:
        """Every started name is reported in order."""
        service = RegistrationService(rpc=rpc, store=store)

        started = service.register_many(["d/a", "d/b"], "v")

        assert [s.name for s in started] == ["d/a", "d/b"]
        assert {e.value for e in store.record.elements} == {"v"}


class TestAdvance:
    """Tests for advance() and clean_up()."""

    def test_advance_finalizes_ready(self, rpc, store) -> None:
        """Mature registrations are finalized and saved as activated."""
        service = RegistrationService(rpc=rpc, store=store)
        service.register("d/a")
        rpc.mine(FIRSTUPDATE_DELAY)

        assert service.advance() == ["d/a"]
        assert isinstance(store.record.elements[0], ActivatedRecord)

    def test_advance_failure_saves_progress(self, rpc, store) -> None:
        """Entries finalized before a batch error are durable."""
        service = RegistrationService(rpc=rpc, store=store)
        service.register_many(["d/a", "d/b"])
        rpc.mine(FIRSTUPDATE_DELAY)
        rpc.reveal_errors["d/b"] = RemoteError(-6, "Insufficient funds")

        with pytest.raises(BatchError):
            service.advance()

        first, second = store.record.elements
        assert isinstance(first, ActivatedRecord)
        assert isinstance(second, ReservedRecord)

    def test_clean_up_removes_settled(self, rpc, store) -> None:
        """Confirmed reveals are dropped from the checkpoint."""
        service = RegistrationService(rpc=rpc, store=store)
        service.register("d/a")
        rpc.mine(FIRSTUPDATE_DELAY)
        service.advance()
        rpc.mine(1)

        assert service.clean_up() == 1
        assert store.record == ManagerRecord(elements=())

    def test_corrupt_checkpoint_not_overwritten(self, rpc) -> None:
        """A checkpoint that fails to load is never replaced."""
        store = Mock()
        store.load.side_effect = RecordFormatError("bad version")
        service = RegistrationService(rpc=rpc, store=store)

        with pytest.raises(RecordFormatError):
            service.advance()

        store.save.assert_not_called()


class TestStatus:
    """Tests for status()."""

    def test_status_is_read_only(self, rpc, store) -> None:
        """status() reports entries without writing the checkpoint."""
        service = RegistrationService(rpc=rpc, store=store)
        service.register_many(["d/a", "d/b"])
        rpc.mine(FIRSTUPDATE_DELAY)
        service.advance()
        service.register("d/c")
        saves = store.saves

        result = service.status()

        assert result == [
            ProcessStatus("d/a", ProcessState.FINALIZED, settled=False),
            ProcessStatus("d/b", ProcessState.FINALIZED, settled=False),
            ProcessStatus("d/c", ProcessState.RESERVED, can_finalize=False),
        ]
        assert store.saves == saves

    def test_status_without_checkpoint(self, rpc, store) -> None:
        """No checkpoint means no registrations."""
        assert RegistrationService(rpc=rpc, store=store).status() == []
