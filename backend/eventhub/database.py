"""Database configuration and session management."""

import logging
from collections.abc import Generator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


# Base class for ORM models
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


class Database:
    """Owns the engine and session factory for one database URL.

    The handle is created closed; ``open()`` builds the engine and
    ``close()`` disposes of its connection pool. The FastAPI lifespan opens
    it on startup and stores it on ``app.state.database``.
    """

    def __init__(self, url: str, **engine_options) -> None:
        self.url = url
        self._engine_options = engine_options
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    def open(self) -> None:
        """Create the engine and session factory."""
        if self._engine is not None:
            return

        options = dict(self._engine_options)
        if self.url.startswith("postgresql"):
            # Connection pooling and PostgreSQL optimizations:
            # - READ COMMITTED lets conditional updates re-check rows after a concurrent commit
            # - lock_timeout keeps a request from waiting indefinitely on a row lock
            options.setdefault("pool_pre_ping", True)
            options.setdefault("pool_size", 10)
            options.setdefault("max_overflow", 20)
            options.setdefault("pool_recycle", 3600)
            options.setdefault("isolation_level", "READ COMMITTED")
            options.setdefault("connect_args", {"options": "-c lock_timeout=5000"})

        self._engine = create_engine(self.url, **options)
        self._session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self._engine,
            expire_on_commit=False,  # Prevent lazy loading errors after commit
        )
        logger.info("Database engine opened (dialect=%s)", self._engine.dialect.name)

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine closed")

    def session(self) -> Session:
        """Return a new session bound to the engine."""
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    def create_all(self) -> None:
        """Create all tables known to the ORM metadata."""
        # Import models so every table is registered on Base.metadata
        import eventhub.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)


# Dependency for FastAPI routes
def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Yields:
        Session: SQLAlchemy database session from the app's Database handle

    Example:
        @router.get("/events")
        def list_events(db: Session = Depends(get_db)):
            return db.query(Event).all()
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
