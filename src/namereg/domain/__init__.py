"""
Domain layer - Pure business logic with zero framework imports.

This package contains the name registration state machine, the manager
that drives many registrations at once, and the port interfaces it needs
from infrastructure, keeping the core decoupled from HTTP, databases and
schema libraries.
"""

from .exceptions import (
    BatchError,
    InvalidStateError,
    NameAlreadyReserved,
    RecordFormatError,
    RegistrationError,
    RemoteError,
    RpcError,
    RpcTransportError,
    UnknownTransaction,
    WalletLocked,
    WalletPassphraseIncorrect,
)
from .manager import RegistrationManager
from .ports import CheckpointStore, Commitment, NameRpc, NameStatus, ProcessState
from .records import ActivatedRecord, ManagerRecord, ProcessRecord, ReservedRecord
from .registration import FIRSTUPDATE_DELAY, RegistrationProcess
from .service import ProcessStatus, RegistrationService

__all__ = [
    "FIRSTUPDATE_DELAY",
    "ActivatedRecord",
    "BatchError",
    "CheckpointStore",
    "Commitment",
    "InvalidStateError",
    "ManagerRecord",
    "NameAlreadyReserved",
    "NameRpc",
    "NameStatus",
    "ProcessRecord",
    "ProcessState",
    "ProcessStatus",
    "RecordFormatError",
    "RegistrationError",
    "RegistrationManager",
    "RegistrationProcess",
    "RegistrationService",
    "RemoteError",
    "ReservedRecord",
    "RpcError",
    "RpcTransportError",
    "UnknownTransaction",
    "WalletLocked",
    "WalletPassphraseIncorrect",
]
