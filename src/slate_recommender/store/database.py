"""
Database connection and session management.

``SlateStore`` owns the engine and session factory. It is constructed once at
process startup and handed to each pipeline stage; nothing here is a module
level singleton.
"""

from contextlib import contextmanager
from typing import Generator

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..errors import FatalStoreError, StoreError, TransientStoreError

logger = structlog.get_logger(__name__)

# SQLAlchemy errors worth one more attempt
TRANSIENT_DB_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.TimeoutError,
)


def build_engine(url: str, pool_size: int = 10, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite URLs get a thread-agnostic connection; in-memory SQLite shares a
    single connection so every session sees the same database.

    Args:
        url: Database URL
        pool_size: Connection pool size (ignored for SQLite)
        echo: Echo SQL statements

    Returns:
        SQLAlchemy Engine instance
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_size=pool_size,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before using
    )


def translate_store_error(error: Exception) -> StoreError:
    """Map a SQLAlchemy (or unknown) exception onto the store error taxonomy."""
    if isinstance(error, StoreError):
        return error
    if isinstance(error, TRANSIENT_DB_ERRORS):
        return TransientStoreError(str(error))
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return TransientStoreError(str(error))
    return FatalStoreError(str(error))


class SlateStore:
    """
    Explicit data store handle.

    Usage:
        >>> store = SlateStore.from_settings(settings)
        >>> with store.session() as session:
        ...     session.add(Slate(...))
        ...     # Automatically commits on success, rolls back on exception
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

        logger.info("store_created", database=engine.url.database, dialect=engine.dialect.name)

    @classmethod
    def from_url(cls, url: str, pool_size: int = 10, echo: bool = False) -> "SlateStore":
        return cls(build_engine(url, pool_size=pool_size, echo=echo))

    @classmethod
    def from_settings(cls, settings=None) -> "SlateStore":
        if settings is None:
            from slate_recommender.config import settings
        return cls.from_url(
            settings.database_url,
            pool_size=settings.database_pool_size,
            echo=settings.database_echo_sql,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Context manager for one atomic unit of work.

        Commits on success. On any exception the transaction is rolled back, so
        no partial write is observable. SQLAlchemy errors are re-raised as
        TransientStoreError or FatalStoreError with the original as __cause__;
        anything else propagates unchanged.

        Yields:
            SQLAlchemy Session instance

        Raises:
            TransientStoreError: Connection-level or operational failure
            FatalStoreError: Any other failure inside the unit of work
        """
        session = self._session_factory()

        try:
            yield session
            session.commit()
            logger.debug("store_session_committed")
        except Exception as e:
            session.rollback()
            logger.error(
                "store_session_rollback",
                error=str(e),
                error_type=type(e).__name__,
            )
            if not isinstance(e, sa_exc.SQLAlchemyError):
                raise
            raise translate_store_error(e) from e
        finally:
            session.close()

    def create_all_tables(self) -> None:
        """
        Create all database tables.

        WARNING: Only use this for testing or initial setup.
        """
        from .models import Base

        Base.metadata.create_all(self.engine)
        logger.info("store_tables_created")

    def drop_all_tables(self) -> None:
        """
        Drop all database tables.

        WARNING: Destructive operation. Only use for testing.
        """
        from .models import Base

        Base.metadata.drop_all(self.engine)
        logger.warning("store_tables_dropped")

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("store_disposed")

    def ping(self) -> bool:
        """Return True if a trivial query succeeds."""
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except sa_exc.SQLAlchemyError as e:
            logger.warning("store_ping_failed", error=str(e), error_type=type(e).__name__)
            return False
        return True
