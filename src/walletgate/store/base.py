"""Persistence capability consumed by the config store.

A backend maps a namespace to a JSON-compatible document. ``save`` must
be durable by the time it returns; the config store relies on that as its
flush point. Backends report storage failures as ``PersistenceError``.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

logger = logging.getLogger(__name__)


class PersistBackend(ABC):
    """Abstract key-value persistence backend."""

    @abstractmethod
    async def load(self, namespace: str) -> Optional[dict[str, Any]]:
        """Return the stored document, or None if the namespace is empty."""
        pass

    @abstractmethod
    async def save(self, namespace: str, value: dict[str, Any]) -> None:
        """Replace the stored document for a namespace."""
        pass


class MemoryBackend(PersistBackend):
    """Process-local backend, used for tests and ephemeral gateways."""

    def __init__(self, initial: Optional[dict[str, dict[str, Any]]] = None):
        self._records: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})
        self.save_count = 0

    async def load(self, namespace: str) -> Optional[dict[str, Any]]:
        record = self._records.get(namespace)
        return copy.deepcopy(record) if record is not None else None

    async def save(self, namespace: str, value: dict[str, Any]) -> None:
        self._records[namespace] = copy.deepcopy(value)
        self.save_count += 1
        logger.debug(f"Saved record '{namespace}' in memory")
