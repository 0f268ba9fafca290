# haccp_review/db/init_db.py
"""Database initialization utilities."""
import logging
from typing import Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from haccp_review.db.base import Base, import_models
from haccp_review.db.session import get_engine

logger = logging.getLogger(__name__)


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Create all tables that do not exist yet.

    Note: This is suitable for development/testing only.
    """
    engine = engine or get_engine()
    import_models()

    existing_tables = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    created = set(Base.metadata.tables) - existing_tables
    if created:
        logger.info(f"Database tables created: {', '.join(sorted(created))}")
    else:
        logger.info(f"Database already initialized with {len(existing_tables)} tables")


def drop_db(engine: Optional[Engine] = None) -> None:
    """
    Drop all database tables.

    WARNING: This will delete all data! Only for development/testing purposes.
    """
    engine = engine or get_engine()
    import_models()
    Base.metadata.drop_all(bind=engine)
    logger.warning("All database tables dropped")
