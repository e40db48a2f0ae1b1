"""Base repository with common CRUD operations."""
import logging
from contextlib import contextmanager
from typing import TypeVar, Generic, Type, Optional, Dict, Any, Iterator

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import PersistenceError
from src.db.base import Base
from src.models.base import utcnow

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """Base repository with common database operations."""

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    @contextmanager
    def guard(self, operation: str) -> Iterator[None]:
        """
        Roll back and re-raise database failures as PersistenceError.

        Args:
            operation: Name of the repository operation, for logs and details
        """
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"{self.model.__tablename__}.{operation} failed: {e}")
            raise PersistenceError(
                f"Database {operation} on {self.model.__tablename__} failed",
                operation=operation,
                original_error=str(e),
            ) from e

    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create new record.

        Args:
            obj_in: Dictionary with object data

        Returns:
            Created model instance
        """
        with self.guard("create"):
            db_obj = self.model(**obj_in)
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj

    def get(self, id: Any, include_deleted: bool = False) -> Optional[ModelType]:
        """
        Get record by ID.

        Args:
            id: Record primary key
            include_deleted: Whether to include soft-deleted records

        Returns:
            Model instance or None if not found
        """
        with self.guard("get"):
            query = self.db.query(self.model).filter(self.model.id == id)

            # Handle soft delete if model has deleted_at column
            if hasattr(self.model, 'deleted_at') and not include_deleted:
                query = query.filter(self.model.deleted_at.is_(None))

            return query.first()

    def save(self, db_obj: ModelType) -> ModelType:
        """
        Persist every pending change on an already loaded instance.

        Args:
            db_obj: Model instance modified in place

        Returns:
            Refreshed model instance
        """
        with self.guard("update"):
            self.db.add(db_obj)
            self.db.commit()
            self.db.refresh(db_obj)
            return db_obj

    def update(self, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Update record.

        Args:
            id: Record primary key
            obj_in: Dictionary with fields to update

        Returns:
            Updated model instance or None if not found
        """
        db_obj = self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        return self.save(db_obj)

    def delete(self, id: Any, soft: bool = True) -> bool:
        """
        Delete record (soft or hard).

        Args:
            id: Record primary key
            soft: Whether to soft delete (if model supports it)

        Returns:
            True if successful, False if record not found
        """
        db_obj = self.get(id, include_deleted=True)
        if not db_obj:
            return False

        with self.guard("delete"):
            # Soft delete if supported and requested
            if soft and hasattr(self.model, 'deleted_at'):
                if db_obj.deleted_at is None:
                    db_obj.deleted_at = utcnow()
                self.db.commit()
            else:
                self.db.delete(db_obj)
                self.db.commit()

        return True

    def exists(self, id: Any, include_deleted: bool = False) -> bool:
        """
        Check if record exists.

        Args:
            id: Record primary key
            include_deleted: Whether to include soft-deleted records

        Returns:
            True if record exists, False otherwise
        """
        with self.guard("exists"):
            query = self.db.query(self.model.id).filter(self.model.id == id)

            if hasattr(self.model, 'deleted_at') and not include_deleted:
                query = query.filter(self.model.deleted_at.is_(None))

            return self.db.query(query.exists()).scalar()

    def count(
        self,
        include_deleted: bool = False,
        filters: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        Count records.

        Args:
            include_deleted: Whether to include soft-deleted records
            filters: Dictionary of column:value filters

        Returns:
            Count of records
        """
        with self.guard("count"):
            query = self.db.query(func.count(self.model.id))

            if hasattr(self.model, 'deleted_at') and not include_deleted:
                query = query.filter(self.model.deleted_at.is_(None))

            if filters:
                for column, value in filters.items():
                    if hasattr(self.model, column):
                        query = query.filter(getattr(self.model, column) == value)

            return query.scalar() or 0

