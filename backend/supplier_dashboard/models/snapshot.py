from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from supplier_dashboard.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PayloadSnapshot(Base):
    """Last successful upstream payload per cache key (JSON text)."""

    __tablename__ = "payload_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(200), nullable=False, unique=True, index=True)
    payload = Column(Text, nullable=False)
    fetched_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
