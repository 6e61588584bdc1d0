"""SQL-backed persistence for gateway records."""

import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from walletgate.errors import PersistenceError
from walletgate.store.base import PersistBackend
from walletgate.store.database import get_session_factory
from walletgate.store.models import PersistedRecord

logger = logging.getLogger(__name__)


class SqlBackend(PersistBackend):
    """Stores each namespace as one JSON row in ``persisted_records``.

    Tables must exist before use (see ``init_db``). Database errors are
    raised as ``PersistenceError``.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self._session_factory = session_factory

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def load(self, namespace: str) -> Optional[dict[str, Any]]:
        try:
            async with self._sessions()() as session:
                stmt = select(PersistedRecord).where(PersistedRecord.namespace == namespace)
                result = await session.execute(stmt)
                record = result.scalar_one_or_none()
                if record is None:
                    return None
                return dict(record.payload)
        except SQLAlchemyError as e:
            raise PersistenceError(namespace, str(e)) from e

    async def save(self, namespace: str, value: dict[str, Any]) -> None:
        async with self._sessions()() as session:
            try:
                record = await session.get(PersistedRecord, namespace)
                if record is None:
                    session.add(PersistedRecord(namespace=namespace, payload=value))
                else:
                    record.payload = value
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Failed to persist record '{namespace}': {e}")
                raise PersistenceError(namespace, str(e)) from e
        logger.debug(f"Persisted record '{namespace}'")
