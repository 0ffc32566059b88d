"""RPC adapters - JSON-RPC transport and Namecoin implementation of NameRpc."""

from .jsonrpc import JsonRpcClient
from .namecoin import NamecoinRpc

__all__ = ["JsonRpcClient", "NamecoinRpc"]
