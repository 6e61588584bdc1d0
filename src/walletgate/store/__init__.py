"""Persistence backends for gateway records."""

from walletgate.store.base import MemoryBackend, PersistBackend
from walletgate.store.database import close_db, init_db
from walletgate.store.models import PersistedRecord
from walletgate.store.sql import SqlBackend

__all__ = [
    # Backends
    "PersistBackend",
    "MemoryBackend",
    "SqlBackend",
    # Models
    "PersistedRecord",
    # Database
    "init_db",
    "close_db",
]
