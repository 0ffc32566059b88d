"""Storage adapters - Checkpoint stores and the record codec."""

from .file import FileCheckpointStore
from .postgres import PostgresCheckpointStore, run_migrations
from .records import decode_manager, dumps_manager, encode_manager, loads_manager

__all__ = [
    "FileCheckpointStore",
    "PostgresCheckpointStore",
    "decode_manager",
    "dumps_manager",
    "encode_manager",
    "loads_manager",
    "run_migrations",
]
