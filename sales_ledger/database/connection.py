"""
Database Connection Management

Synchronous SQLAlchemy 2.0 engine and session handling. There is no
process-wide connection: callers create an Engine and acquire a session per
unit of work through session_scope(), which commits on success, rolls back
on any error and always closes the session.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from sales_ledger.config import get_settings
from sales_ledger.database.models import Base

logger = structlog.get_logger(__name__)


def create_db_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create a database engine.

    Args:
        url: SQLAlchemy URL; defaults to the configured database
        echo: Echo SQL statements; defaults to the configured value

    Returns:
        Engine: A new engine with its own connection pool
    """
    settings = get_settings()
    db_url = url or settings.database.sync_url
    engine = create_engine(
        db_url,
        echo=settings.database.echo if echo is None else echo,
        future=True,
        pool_pre_ping=True,
    )
    logger.info("Database engine created", dialect=engine.dialect.name)
    return engine


def create_schema(engine: Engine) -> None:
    """Create every ledger table that does not exist yet"""
    Base.metadata.create_all(engine)
    logger.info("Database schema created", tables=len(Base.metadata.tables))


def drop_schema(engine: Engine) -> None:
    """Drop every ledger table"""
    Base.metadata.drop_all(engine)
    logger.info("Database schema dropped")


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """
    Provide a transactional session.

    Yields:
        Session: Database session

    Example:
        with session_scope(engine) as session:
            SalesRepository(session).save_ledger(ledger)
    """
    factory = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    session = factory()
    logger.debug("Creating new database session")
    try:
        yield session
        session.commit()
        logger.debug("Database session committed successfully")
    except Exception as e:
        logger.error(
            "Database session error, rolling back",
            error=str(e),
            error_type=type(e).__name__,
        )
        session.rollback()
        raise
    finally:
        session.close()
        logger.debug("Database session closed")

