"""
Persisted state records - Tagged variants for registration checkpoints.

A registration process is saved as exactly one of two variants:

- ReservedRecord: commit transaction submitted, reveal still pending
- ActivatedRecord: reveal transaction submitted

NOT_STARTED processes have nothing durable to save and have no record.
The manager record is the ordered tuple of its process records.

The wire layout (type tag, version, camelCase keys) is owned by the
schema-checked codec in namereg.adapters.storage.records.
"""

from dataclasses import dataclass

PROCESS_RECORD_TYPE = "RegistrationProcess"
MANAGER_RECORD_TYPE = "RegistrationManager"
RECORD_VERSION = 1


@dataclass(frozen=True)
class ReservedRecord:
    """Saved state of a process in RESERVED state."""

    name: str
    value: str
    rand: str
    tx: str


@dataclass(frozen=True)
class ActivatedRecord:
    """Saved state of a process in FINALIZED state."""

    name: str
    value: str
    rand: str
    tx: str
    tx_activation: str


ProcessRecord = ReservedRecord | ActivatedRecord


@dataclass(frozen=True)
class ManagerRecord:
    """Saved state of a whole registration manager, in insertion order."""

    elements: tuple[ProcessRecord, ...] = ()
