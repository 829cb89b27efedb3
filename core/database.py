from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Type, Optional, List, Generator, Any
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from core.config import settings
from core.base import Base

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str):
    """Create the SQLAlchemy engine for the given URL.

    SQLite URLs (used for local tooling and tests) do not take pool sizing
    arguments.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, future=True)

    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=30,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=False
    )


# Database engine configuration
engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Generic type for entities
T = TypeVar('T')


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


class RepositoryInterface(ABC, Generic[T]):
    """Generic interface for repositories."""

    @abstractmethod
    def create(self, entity: T) -> T:
        """Create a new entity."""
        pass

    @abstractmethod
    def get_by_id(self, entity_id: str) -> Optional[T]:
        """Get entity by ID."""
        pass

    @abstractmethod
    def get_all(self) -> List[T]:
        """Get all entities."""
        pass

    @abstractmethod
    def update(self, entity_id: str, entity_data: dict[str, Any]) -> Optional[T]:
        """Update an entity."""
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> bool:
        """Delete an entity."""
        pass


class BaseRepository(RepositoryInterface[T]):
    """Base repository implementation bound to a request session."""

    def __init__(self, session: Session, model: Type[T]):
        self.session = session
        self.model = model

    def create(self, entity: T) -> T:
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        return entity

    def get_by_id(self, entity_id: str) -> Optional[T]:
        return self.session.query(self.model).filter(
            self.model.id == entity_id  # type: ignore
        ).first()

    def get_all(self) -> List[T]:
        return self.session.query(self.model).all()

    def update(self, entity_id: str, entity_data: dict[str, Any]) -> Optional[T]:
        entity = self.get_by_id(entity_id)
        if entity:
            for key, value in entity_data.items():
                setattr(entity, key, value)
            self.session.commit()
            self.session.refresh(entity)
            return entity
        return None

    def delete(self, entity_id: str) -> bool:
        entity = self.get_by_id(entity_id)
        if entity:
            self.session.delete(entity)
            self.session.commit()
            return True
        return False


def init_db(bind=None) -> None:
    """Create all tables. Migrations are the normal path; this is for tooling and tests."""
    import models  # noqa: F401  (registers every model on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created")
