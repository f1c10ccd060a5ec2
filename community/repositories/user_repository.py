"""User repository for registration and login lookups."""

from community.models import User

from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email).first()

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def create_user(self, username: str, email: str, password_hash: str, role: str) -> User:
        return self.add(
            User(username=username, email=email, password_hash=password_hash, role=role)
        )

    def set_role(self, user: User, role: str) -> User:
        user.role = role
        return self.save(user)
