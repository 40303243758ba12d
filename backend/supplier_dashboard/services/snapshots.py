# backend/supplier_dashboard/services/snapshots.py
"""Last-good payload cache backing the fallback producers."""
import json
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from supplier_dashboard.db.session import SessionLocal
from supplier_dashboard.models import PayloadSnapshot

logger = logging.getLogger(__name__)


def analytics_key(start_date: str, end_date: str, limit: int) -> str:
    return f"analytics:{start_date}:{end_date}:{limit}"


def save_snapshot(key: str, payload: Any) -> bool:
    """Upsert the payload under `key`. Returns False if the cache is unavailable."""
    try:
        raw = json.dumps(payload)
    except (TypeError, ValueError) as e:
        logger.warning("Snapshot %s not JSON-serializable: %s", key, e)
        return False
    try:
        with SessionLocal() as db:
            row = db.execute(select(PayloadSnapshot).where(PayloadSnapshot.key == key)).scalar_one_or_none()
            if row is None:
                db.add(PayloadSnapshot(key=key, payload=raw))
            else:
                row.payload = raw
            db.commit()
        return True
    except SQLAlchemyError as e:
        logger.warning("Snapshot cache write failed for %s: %s", key, e)
        return False


def load_snapshot(key: str) -> Optional[Any]:
    try:
        with SessionLocal() as db:
            row = db.execute(select(PayloadSnapshot).where(PayloadSnapshot.key == key)).scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.warning("Snapshot cache read failed for %s: %s", key, e)
        return None
    if row is None:
        return None
    try:
        return json.loads(row.payload)
    except ValueError:
        logger.warning("Discarding corrupt snapshot %s", key)
        return None
