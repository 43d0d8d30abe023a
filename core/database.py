from contextlib import contextmanager
from typing import Generator, Iterator
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine, Session

from core.config import settings
from core.exceptions import AppError, StorageError

logger = logging.getLogger(__name__)

# ============================================================
# ✅ Create SQLModel engine
# ============================================================
# SQLite needs cross-thread access for the FastAPI threadpool;
# for PostgreSQL, pool_pre_ping avoids stale connections
if settings.IS_SQLITE:
    logger.warning("⚠️ Using SQLite database at %s", settings.DATABASE_URL)
    engine = create_engine(
        settings.DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
    )


# ============================================================
# ✅ Create tables (called at startup)
# ============================================================
def create_db_and_tables() -> None:
    """
    Create all database tables based on SQLModel models.
    This runs automatically at app startup.
    """
    # Registers the table models on SQLModel.metadata
    import models.models  # noqa: F401

    try:
        SQLModel.metadata.create_all(engine)
        logger.info("✅ All database tables created successfully.")
    except SQLAlchemyError:
        logger.exception("❌ Failed to create tables")
        raise


# ============================================================
# ✅ Dependency: FastAPI session generator
# ============================================================
def get_session() -> Generator[Session, None, None]:
    """
    Provides a SQLModel Session to FastAPI dependencies.
    Closes automatically after request completes.
    """
    with Session(engine) as session:
        yield session


# ============================================================
# ✅ Unit of work
# ============================================================
@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Run a block of writes as one unit: commit on success, roll back on any
    failure. Storage failures surface as StorageError, application errors
    raised inside the block propagate unchanged.
    """
    try:
        yield session
        session.commit()
    except AppError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("❌ Transaction rolled back: %s", e)
        raise StorageError(e) from e
    except Exception:
        session.rollback()
        raise
