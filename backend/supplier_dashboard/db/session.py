import logging
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from supplier_dashboard.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
DATABASE_URL = settings.database_url

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, future=True, connect_args=connect_args)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()

def init_db() -> None:
    """Create missing tables (snapshot cache). Safe to call repeatedly."""
    if engine.url.get_backend_name() == "sqlite" and engine.url.database:
        # Default DB lives in backend/supplier_dashboard/data/, make sure the folder exists
        Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
    import supplier_dashboard.models  # noqa: F401  (register ORM tables on Base)
    Base.metadata.create_all(bind=engine)

def maybe_bootstrap() -> None:
    if not settings.auto_bootstrap_db:
        logger.info("[DB] Auto-bootstrap disabled")
        return
    try:
        init_db()
        logger.info("[DB] Tables ready at %s", engine.url.render_as_string(hide_password=True))
    except Exception as e:
        # The snapshot cache is optional: without it fallbacks use bundled mocks only
        logger.warning("[DB] Bootstrap skipped due to error: %s", e)
