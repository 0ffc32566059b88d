"""
Domain exceptions - Semantic error types for name registration.

This module defines domain-specific exceptions that communicate
business rule violations and remote failures without leaking
infrastructure details (httpx, psycopg, pydantic).

Taxonomy:
- Local invariant violations: InvalidStateError
- Claim conflicts: NameAlreadyReserved
- Persistence format errors: RecordFormatError
- Batch outcomes: BatchError
- RPC failures: RpcTransportError, RemoteError and its mapped subclasses
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class InvalidStateError(RegistrationError):
    """Operation called while the process is in the wrong state."""

    pass


class NameAlreadyReserved(RegistrationError):
    """The name is currently owned and not expired."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Name is already reserved: {name}")
        self.name = name


class RecordFormatError(RegistrationError):
    """Persisted record has the wrong type tag, version or state tag."""

    pass


class BatchError(RegistrationError):
    """
    One or more entries of a bulk operation failed.

    Raised after the whole pass completed, so every entry that succeeded
    is already reflected in memory. The partial outcome travels with
    the exception.

    Attributes:
        failures: (name, exception) pairs in processing order
        finalized: processes finalized during the pass (advance)
        removed: number of processes removed (clean up)
    """

    def __init__(
        self,
        failures: list[tuple[str, Exception]],
        *,
        finalized: list | None = None,
        removed: int = 0,
    ) -> None:
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"{len(failures)} registration(s) failed: {names}")
        self.failures = failures
        self.finalized = finalized or []
        self.removed = removed


class RpcError(RegistrationError):
    """Base class for failures talking to the naming service."""

    pass


class RpcTransportError(RpcError):
    """Connectivity, timeout, HTTP-level or malformed-response failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteError(RpcError):
    """Application-level error returned by the remote service."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


class UnknownTransaction(RemoteError):
    """The queried transaction id is not known to the wallet."""

    pass


class WalletLocked(RemoteError):
    """The wallet must be unlocked before this call."""

    pass


class WalletPassphraseIncorrect(RemoteError):
    """The wallet passphrase was rejected."""

    pass
