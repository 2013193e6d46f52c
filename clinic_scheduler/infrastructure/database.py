from contextlib import contextmanager
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import BaseCustomException, handle_database_error

logger = logging.getLogger(__name__)

# Check if using SQLite
is_sqlite = "sqlite" in settings.DATABASE_URL.lower()

if is_sqlite:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False}
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.DEBUG
    )

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

# Base model
Base = declarative_base()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, operation: str = "database operation"):
    """Run a unit of work: commit on success, roll back on any error.

    Domain errors propagate unchanged; raw SQLAlchemy errors are converted
    into DatabaseError.
    """
    try:
        yield db
        db.commit()
    except BaseCustomException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_database_error(e, operation) from e
    except Exception:
        db.rollback()
        raise

