"""
Base repository with standardized CRUD operations and error handling.

Repositories never commit: they add, query and flush inside the session
owned by the caller's ``UnitOfWork``.
"""

from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session
from sqlalchemy.orm.exc import StaleDataError

from haccp_review.config.logging import get_logger
from haccp_review.core.exceptions import (
    EntityNotFoundError,
    OptimisticLockError,
    RepositoryError,
)
from haccp_review.models.base import BaseModel

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Write Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity and flush it so generated values are populated.

        Raises:
            RepositoryError: If the insert fails
        """
        self.db.add(entity)
        self.flush()
        logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
        return entity

    def delete(self, entity: ModelType) -> None:
        """Delete an entity (and whatever its relationships cascade to)."""
        self.db.delete(entity)
        self.flush()
        logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")

    def flush(self) -> None:
        """
        Flush pending changes.

        Raises:
            OptimisticLockError: If a versioned row was changed by another transaction
            RepositoryError: For any other database failure
        """
        try:
            self.db.flush()
        except StaleDataError as e:
            raise OptimisticLockError(self.model.__name__, None) from e
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Flush failed: {str(e)}",
                operation="flush",
                table=self.model.__tablename__,
            ) from e

    # ==================== Read Operations ====================

    def query(self) -> Query:
        return self.db.query(self.model)

    def find_by_id(self, id: str) -> Optional[ModelType]:
        """
        Find entity by ID.

        Returns:
            Entity or None
        """
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {str(e)}", operation="get") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            EntityNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if entity is None:
            raise EntityNotFoundError(self.model.__name__, id)
        return entity

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        skip: int = 0,
        limit: Optional[int] = 100,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[ModelType]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs; list values become IN filters
            skip: Number of records to skip
            limit: Maximum number of records, ``None`` for all
            order_by: Fields to order by (prefix with - for desc)

        Returns:
            List of matching entities
        """
        try:
            query = self._apply_ordering(self._apply_criteria(self.query(), criteria), order_by)
            if skip:
                query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {str(e)}", operation="select") from e

    def count(self, criteria: Optional[Dict[str, Any]] = None) -> int:
        """Count entities matching criteria."""
        try:
            query = self._apply_criteria(
                self.db.query(func.count(self.model.id)), criteria or {}
            )
            return query.scalar() or 0
        except SQLAlchemyError as e:
            raise RepositoryError(f"Count failed: {str(e)}", operation="count") from e

    # ==================== Helpers ====================

    def _apply_criteria(self, query: Query, criteria: Dict[str, Any]) -> Query:
        for key, value in criteria.items():
            if not hasattr(self.model, key):
                raise RepositoryError(
                    f"{self.model.__name__} has no attribute '{key}'",
                    operation="select",
                    table=self.model.__tablename__,
                )
            column = getattr(self.model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query

    def _apply_ordering(self, query: Query, order_by: Optional[Sequence[str]]) -> Query:
        for field in order_by or ():
            if field.startswith("-"):
                query = query.order_by(getattr(self.model, field[1:]).desc())
            else:
                query = query.order_by(getattr(self.model, field).asc())
        return query
