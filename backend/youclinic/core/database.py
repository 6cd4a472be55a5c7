"""
Database connection and session management.

Provides SQLAlchemy engine, session factory, and dependency injection
for database sessions in FastAPI endpoints.
"""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import QueuePool, StaticPool

from .config import settings


# =============================================================================
# SQLAlchemy Base
# =============================================================================

Base = declarative_base()


# =============================================================================
# Engine Configuration
# =============================================================================

def _build_engine(url: str):
    """
    Create the engine for ``url``.

    SQLite (used by the test suite) shares one connection across threads;
    everything else gets the pooled PostgreSQL configuration.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.debug,
        )

    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        poolclass=QueuePool,
        pool_pre_ping=True,
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_pool_timeout,
        echo=settings.debug,
    )


engine = _build_engine(settings.database_url)


# =============================================================================
# Session Factory
# =============================================================================

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# =============================================================================
# Event Listeners for Connection Management
# =============================================================================

@event.listens_for(engine, "connect")
def set_connection_settings(dbapi_connection, connection_record):
    """
    Configure connection settings when a new connection is created.

    PostgreSQL sessions run in UTC with a statement timeout; SQLite
    gets foreign key enforcement.
    """
    cursor = dbapi_connection.cursor()
    if engine.dialect.name == "postgresql":
        cursor.execute("SET timezone='UTC'")
        cursor.execute("SET statement_timeout = '30s'")
    elif engine.dialect.name == "sqlite":
        cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# =============================================================================
# Dependency Injection
# =============================================================================

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database session injection.

    Creates a new session for each request and ensures proper cleanup.

    Yields:
        SQLAlchemy Session instance

    Example:
        @router.get("/leads")
        def get_leads(db: Session = Depends(get_db)):
            return db.query(Lead).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Database Utilities
# =============================================================================

def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables defined in models. Intended for development and
    tests; production schemas should be managed by migrations.
    """
    from .. import models  # noqa: F401  (registers every table on Base)

    Base.metadata.create_all(bind=engine)

