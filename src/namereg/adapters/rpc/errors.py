"""
RPC error mapping - Translates daemon error codes to domain exceptions.

Keeps the mapping coarse and conservative: only codes with a clear
meaning for the registration flow get their own exception, everything
else surfaces as a generic RemoteError carrying the original code.

Codes follow the Bitcoin/Namecoin JSON-RPC conventions.
"""

from namereg.domain.exceptions import (
    NameAlreadyReserved,
    RemoteError,
    UnknownTransaction,
    WalletLocked,
    WalletPassphraseIncorrect,
)

RPC_WALLET_ERROR = -4  # name_show: name not found
RPC_INVALID_ADDRESS_OR_KEY = -5  # gettransaction: unknown txid
RPC_WALLET_UNLOCK_NEEDED = -13
RPC_WALLET_PASSPHRASE_INCORRECT = -14

_CODE_MAP: dict[int, type[RemoteError]] = {
    RPC_WALLET_UNLOCK_NEEDED: WalletLocked,
    RPC_WALLET_PASSPHRASE_INCORRECT: WalletPassphraseIncorrect,
}

# Message fragments the daemon uses when a name is already taken.
_NAME_TAKEN_MARKERS = ("already exists", "already active", "already registered")


def map_remote_error(code: int, message: str) -> RemoteError:
    """
    Map a JSON-RPC error object to a domain exception.

    Args:
        code: The error code returned by the daemon
        message: The error message returned by the daemon

    Returns:
        The mapped exception (not raised). Unknown codes map to RemoteError.
    """
    exc_type = _CODE_MAP.get(code, RemoteError)
    return exc_type(code, message)


def map_transaction_error(error: RemoteError) -> RemoteError:
    """Refine an error from gettransaction: -5 means the txid is unknown."""
    if error.code == RPC_INVALID_ADDRESS_OR_KEY:
        return UnknownTransaction(error.code, error.message)
    return error


def is_name_taken(error: RemoteError) -> bool:
    """Whether a commit/reveal error says the name is already owned."""
    message = error.message.lower()
    return any(marker in message for marker in _NAME_TAKEN_MARKERS)


def name_taken_error(name: str, error: RemoteError) -> NameAlreadyReserved | RemoteError:
    """Map a commit/reveal error to NameAlreadyReserved where it applies."""
    if is_name_taken(error):
        return NameAlreadyReserved(name)
    return error
