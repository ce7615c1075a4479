"""
Base repository with standardized CRUD operations and error handling.

Repositories never commit on their own unless asked to; services own the
transaction boundary and decide when a unit of work is complete.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import EntityAlreadyExistsError, RepositoryError
from ogs.core.logging import get_logger
from ogs.models.base import BaseModel

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing create/read/update for one model.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    @property
    def _table(self) -> str:
        return self.model.__tablename__

    # ==================== Create Operations ====================

    def create(self, entity: ModelType, commit: bool = False) -> ModelType:
        """
        Persist a new entity.

        Raises:
            EntityAlreadyExistsError: If a uniqueness constraint is violated
            RepositoryError: On any other database failure
        """
        try:
            self.db.add(entity)
            if commit:
                self.db.commit()
                self.db.refresh(entity)
            else:
                self.db.flush()

            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity

        except IntegrityError as e:
            self.db.rollback()
            raise EntityAlreadyExistsError(
                f"{self.model.__name__} already exists", table=self._table
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Create failed: {str(e)}", table=self._table) from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: int) -> Optional[ModelType]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {str(e)}", table=self._table) from e

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        order_by: Optional[List[str]] = None,
    ) -> List[ModelType]:
        """
        Find entities matching simple equality criteria.

        Args:
            criteria: Filter criteria as key-value pairs
            skip: Number of records to skip
            limit: Maximum number of records
            order_by: List of fields to order by (prefix with - for desc)
        """
        try:
            query = self.db.query(self.model)

            for key, value in criteria.items():
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple)):
                    query = query.filter(column.in_(value))
                else:
                    query = query.filter(column == value)

            for field in order_by or []:
                if field.startswith("-"):
                    query = query.order_by(getattr(self.model, field[1:]).desc())
                else:
                    query = query.order_by(getattr(self.model, field))

            return query.offset(skip).limit(limit).all()

        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {str(e)}", table=self._table) from e

    def find_one_by_criteria(self, criteria: Dict[str, Any]) -> Optional[ModelType]:
        results = self.find_by_criteria(criteria, limit=1)
        return results[0] if results else None

    # ==================== Update Operations ====================

    def update(self, entity: ModelType, data: Dict[str, Any], commit: bool = False) -> ModelType:
        """Apply ``data`` to an already loaded entity."""
        try:
            for key, value in data.items():
                setattr(entity, key, value)

            if commit:
                self.db.commit()
                self.db.refresh(entity)
            else:
                self.db.flush()
            return entity

        except IntegrityError as e:
            self.db.rollback()
            raise EntityAlreadyExistsError(
                f"{self.model.__name__} update violates a unique constraint", table=self._table
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Update failed: {str(e)}", table=self._table) from e
