"""Database session management."""
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from haccp_review.config.settings import get_settings


def build_engine(url: str, echo: bool = False, pool_size: int = 10, max_overflow: int = 5) -> Engine:
    """Create an engine for ``url``; SQLite gets foreign keys enabled."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
    )


@lru_cache()
def get_engine() -> Engine:
    settings = get_settings()
    return build_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_POOL_OVERFLOW,
    )


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    """
    Session factory consumed by ``UnitOfWork``.

    Objects stay readable after commit so services can build responses
    once the transaction has closed.
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine or get_engine(),
    )
