from typing import Generator
from sqlalchemy.orm import Session
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.exc import OperationalError, DisconnectionError
import logging

from core.config import settings

logger = logging.getLogger(__name__)

# Database engine configuration
engine = create_engine(
    settings.DATABASE_URL,
    pool_size=10,
    max_overflow=20,
    pool_timeout=30,
    pool_recycle=3600,
    pool_pre_ping=True,
    echo=False
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Connection attempts before giving up in create_session()
MAX_CONNECTION_RETRIES = 3


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_session() -> Session:
    """Create a verified session for long-running jobs (Celery, scripts).

    Retries on connection errors; the caller owns the session and must close it.
    """
    retry_count = 0

    while True:
        try:
            session = SessionLocal()
            session.execute(text("SELECT 1"))
            return session
        except (OperationalError, DisconnectionError) as e:
            retry_count += 1
            logger.warning(
                f"Database connection attempt {retry_count} failed: {str(e)}"
            )

            if retry_count >= MAX_CONNECTION_RETRIES:
                logger.error("Max database connection retries exceeded")
                raise

            engine.dispose()
