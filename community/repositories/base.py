"""Base repository class with common CRUD operations."""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from community.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Usage:
        class UserRepository(BaseRepository[User]):
            model = User

        repo = UserRepository(session)
        user = repo.get_by_id(1)
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: int) -> T | None:
        """Get a single record by ID."""
        return self.session.get(self.model, id)

    def add(self, instance: T) -> T:
        """Persist a new instance and assign its primary key."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def save(self, instance: T) -> T:
        """Flush pending changes on an already tracked instance."""
        self.session.flush()
        return instance

    def delete(self, instance: T) -> None:
        self.session.delete(instance)
        self.session.flush()

    def commit(self) -> None:
        """Make pending writes durable before running post-commit side effects."""
        self.session.commit()

    def exists(self, id: int) -> bool:
        result = self.session.query(
            self.session.query(self.model).filter(self.model.id == id).exists()  # type: ignore[attr-defined]
        ).scalar()
        return bool(result) if result is not None else False
