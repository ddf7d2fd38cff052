"""
Base Repository - Abstract repository pattern implementation.

Provides the common data access operations shared by calculation tables.
"""
from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Type
from sqlalchemy.orm import Session

from progress_recon.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common data access operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository manages
    """

    def __init__(self, session: Session, model_class: Type[T]):
        self.session = session
        self.model_class = model_class

    def count(self) -> int:
        return self.session.query(self.model_class).count()

    def add(self, entity: T) -> T:
        self.session.add(entity)
        return entity

    def commit(self) -> None:
        """Commit the current transaction."""
        self.session.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        self.session.rollback()

    def flush(self) -> None:
        """Flush pending changes to the database."""
        self.session.flush()

    @abstractmethod
    def exists(self, **criteria) -> bool:
        """
        Check if an entity matching the criteria exists.

        Args:
            **criteria: Field-value pairs to match
        """
        pass
