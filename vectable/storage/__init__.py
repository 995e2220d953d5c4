"""
Storage module: Backends satisfying StorageBackendProtocol.

- SQLiteBackend: SQLite persistence with a hamming_distance() SQL function
- InMemoryBackend: dict-backed store for tests and ephemeral use
- run_in_transaction: all-or-nothing execution of backend writes
"""

from vectable.storage.engine import SQLiteBackend
from vectable.storage.memory import InMemoryBackend
from vectable.storage.transaction import run_in_transaction

__all__ = [
    "SQLiteBackend",
    "InMemoryBackend",
    "run_in_transaction",
]
