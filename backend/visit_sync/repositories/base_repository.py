# backend/visit_sync/repositories/base_repository.py
"""
Base Repository Pattern for the visit sync service.

Provides the foundation for all repository classes with:
- Common lookup and create operations
- Type safety with generics
- Transaction support (managed by services)

Repositories never commit. Services own the unit of work, and a failed
insert is reported without rolling back the caller's transaction so that
callers working inside a savepoint can recover.
"""

import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException, UniqueConstraintViolation

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: Any) -> Optional[T]:
        """Retrieve an entity by its primary key (scalar or tuple for composite keys)."""
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity and flush it to obtain generated keys.

        Note: Does NOT commit - transaction management is handled by service layer.

        Raises:
            UniqueConstraintViolation: the row collides with an existing one
            RepositoryException: any other database failure
        """
        entity = self.model(**kwargs)
        return self.add(entity)

    def add(self, entity: T) -> T:
        """Add a constructed entity and flush it."""
        try:
            self.db.add(entity)
            self.db.flush()
            return entity
        except IntegrityError as exc:
            self.logger.warning("Integrity error creating %s: %s", self.model.__name__, exc.orig)
            raise UniqueConstraintViolation(
                f"Integrity constraint violated for {self.model.__name__}: {exc.orig}"
            ) from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}") from e

    def flush(self) -> None:
        """Flush pending ORM changes."""
        self.db.flush()

    def exists(self, **kwargs: Any) -> bool:
        """Check if an entity exists with given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking existence: {str(e)}")
            raise RepositoryException(f"Failed to check existence: {str(e)}")

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """Find the first entity matching exact-match criteria, or None."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")

    # Protected helper methods for use by subclasses

    def _build_query(self) -> Query:
        """Get base query for the model."""
        return self.db.query(self.model)

    def _first(self, query: Query) -> Optional[T]:
        """Execute a query for a single row with error handling."""
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}")

    def _execute_scalar(self, query: Query) -> Any:
        """Execute scalar query with error handling."""
        try:
            return query.scalar()
        except SQLAlchemyError as e:
            self.logger.error(f"Scalar query error: {str(e)}")
            raise RepositoryException(f"Scalar query failed: {str(e)}")
