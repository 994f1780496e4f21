"""Database engine and session factory."""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.planner.config import Settings, get_settings


def create_engine_from_settings(settings: Settings) -> Engine:
    """Create SQLAlchemy engine from settings.

    Raises:
        ValueError: If DATABASE_URL is unset or empty.
    """
    database_url = settings.database_url

    if not database_url:
        raise ValueError(
            "DATABASE_URL must be set to a valid connection string. "
            "Please configure the database_url setting."
        )

    if database_url.startswith("sqlite"):
        # Sessions are handed to worker threads by async routes and the rate cache
        connect_args = {"check_same_thread": False}
        if ":memory:" in database_url:
            # One shared connection so every session sees the same in-memory database
            return create_engine(
                database_url, connect_args=connect_args, poolclass=StaticPool, echo=False
            )
        return create_engine(database_url, connect_args=connect_args, echo=False)

    return create_engine(database_url, pool_pre_ping=True, echo=False)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create sessionmaker for creating database sessions.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Sessionmaker bound to the engine
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_engine_from_settings(get_settings())
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get global sessionmaker bound to the global engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency for a database session.

    Yields:
        Session instance
    """
    with get_session_factory()() as session:
        yield session
