"""SQLAlchemy models for persisted gateway records."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class PersistedRecord(Base):
    """One JSON document per namespace.

    The gateway keeps its whole config (host, route table, version) in a
    single row so a write replaces it in one statement.
    """

    __tablename__ = "persisted_records"

    namespace: Mapped[str] = mapped_column(String(100), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<PersistedRecord {self.namespace}>"
