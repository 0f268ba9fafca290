# haccp_review/services/common/unit_of_work.py
"""
Unit of Work pattern implementation.

Provides transaction management and repository coordination
for the service layer with SQLAlchemy.
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Callable, Iterator, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from haccp_review.core.exceptions import OptimisticLockError, RepositoryError
from haccp_review.repositories.base import BaseRepository

from .errors import ConcurrentModificationError, TransactionError

logger = logging.getLogger(__name__)

TRepository = TypeVar("TRepository", bound=BaseRepository)


def _concurrency_error(exc: Exception) -> ConcurrentModificationError:
    entity = getattr(exc, "entity", None) or "Entity"
    identifier = getattr(exc, "identifier", None)
    return ConcurrentModificationError(entity, identifier)


@contextmanager
def conflicts_on(resource_type: str, identifier: str) -> Iterator[None]:
    """
    Name the contested row in anonymous concurrency errors raised by the block.

        >>> with conflicts_on("Review", review_id), UnitOfWork(factory) as uow:
        ...     ...
    """
    try:
        yield
    except ConcurrentModificationError as exc:
        if exc.identifier is not None:
            raise
        logger.warning(f"{resource_type} {identifier} lost a concurrent write")
        raise ConcurrentModificationError(resource_type, identifier, details=exc.details) from exc


class UnitOfWork(AbstractContextManager["UnitOfWork"]):
    """
    Unit of Work pattern for managing database transactions.

    Coordinates repositories and ensures atomic commits/rollbacks.
    Lost optimistic-lock races surface as ``ConcurrentModificationError``
    and other persistence failures as ``TransactionError``.

    Usage:
        >>> with UnitOfWork(session_factory) as uow:
        ...     repo = uow.get_repo(ReviewRepository)
        ...     review = repo.get_by_id(review_id)
        ...     review.is_draft = False
        ...     # Auto-commits on __exit__ if no exception
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        auto_commit: bool = True,
        auto_flush: bool = True,
    ) -> None:
        """
        Initialize Unit of Work.

        Args:
            session_factory: Factory function that returns a new Session
            auto_commit: Whether to auto-commit on successful context exit
            auto_flush: Whether to auto-flush changes before queries
        """
        self._session_factory = session_factory
        self._auto_commit = auto_commit
        self._auto_flush = auto_flush

        self.session: Optional[Session] = None
        self._committed: bool = False
        self._rolled_back: bool = False
        self._repo_cache: dict[Type[BaseRepository], BaseRepository] = {}

    # ------------------------------------------------------------------ #
    # Context manager protocol
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "UnitOfWork":
        """Enter the context and initialize session."""
        if self.session is not None:
            raise RuntimeError("UnitOfWork context already entered")

        self.session = self._session_factory()
        self.session.autoflush = self._auto_flush
        self._committed = False
        self._rolled_back = False
        self._repo_cache.clear()

        logger.debug("UnitOfWork session started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        """Exit the context and handle transaction completion."""
        if self.session is None:
            return False

        try:
            if exc_type is None:
                if self._auto_commit and not self._committed and not self._rolled_back:
                    self._commit()
                    logger.debug("UnitOfWork auto-committed")
            else:
                if not self._rolled_back:
                    self.session.rollback()
                    self._rolled_back = True
                    logger.warning(f"UnitOfWork rolled back due to {exc_type.__name__}")

                # Persistence failures raised inside the block are surfaced as service errors
                if isinstance(exc_val, (StaleDataError, OptimisticLockError)):
                    raise _concurrency_error(exc_val) from exc_val
                if isinstance(exc_val, (RepositoryError, SQLAlchemyError)):
                    raise TransactionError("Database operation failed", exc_val) from exc_val
        finally:
            self.session.close()
            self.session = None
            self._repo_cache.clear()
            logger.debug("UnitOfWork session closed")

        return False

    # ------------------------------------------------------------------ #
    # Transaction control
    # ------------------------------------------------------------------ #

    def _commit(self) -> None:
        try:
            self.session.commit()
            self._committed = True
        except StaleDataError as exc:
            logger.warning(f"Commit lost an optimistic lock race: {exc}")
            self.session.rollback()
            self._rolled_back = True
            raise _concurrency_error(exc) from exc
        except SQLAlchemyError as exc:
            logger.error(f"Commit failed: {exc}")
            self.session.rollback()
            self._rolled_back = True
            raise TransactionError("Failed to commit transaction", exc) from exc

    def commit(self) -> None:
        """
        Explicitly commit the current transaction.

        Raises:
            RuntimeError: If called outside of context
            ConcurrentModificationError: If a versioned row changed underneath
            TransactionError: If commit fails
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.commit() called outside of context")

        if self._committed:
            logger.warning("commit() called on already-committed transaction")
            return

        if self._rolled_back:
            raise RuntimeError("Cannot commit a rolled-back transaction")

        self._commit()
        logger.debug("UnitOfWork explicitly committed")

    def flush(self) -> None:
        """
        Flush pending changes to the database without committing.

        Raises:
            RuntimeError: If called outside of context
            ConcurrentModificationError: If a versioned row changed underneath
            TransactionError: If flush fails
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.flush() called outside of context")

        try:
            self.session.flush()
            logger.debug("UnitOfWork flushed")
        except StaleDataError as exc:
            raise _concurrency_error(exc) from exc
        except SQLAlchemyError as exc:
            logger.error(f"Flush failed: {exc}")
            raise TransactionError("Failed to flush changes", exc) from exc

    # ------------------------------------------------------------------ #
    # Repository factory
    # ------------------------------------------------------------------ #

    def get_repo(self, repo_cls: Type[TRepository]) -> TRepository:
        """
        Get or create a repository instance bound to this UnitOfWork's session.

        Repositories are cached per UnitOfWork instance for consistency.

        Raises:
            RuntimeError: If called outside of context
        """
        if self.session is None:
            raise RuntimeError("UnitOfWork.get_repo() called outside of context")

        if repo_cls in self._repo_cache:
            return self._repo_cache[repo_cls]  # type: ignore

        repo_instance = repo_cls(self.session)
        self._repo_cache[repo_cls] = repo_instance

        logger.debug(f"Created repository: {repo_cls.__name__}")
        return repo_instance  # type: ignore
