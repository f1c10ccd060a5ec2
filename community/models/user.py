"""
User-related SQLAlchemy models.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from community.constants import UserRole

from .base import Base

if TYPE_CHECKING:
    from .issue import Issue


class User(Base):
    """
    Registered account.

    Attributes:
        username: Display name shown next to comments
        email: Unique login identifier, also the notification address
        password_hash: bcrypt hash, never serialized
        role: "member" or "admin"
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(16), default=UserRole.MEMBER.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    reported_issues: Mapped[list["Issue"]] = relationship(
        "Issue", back_populates="reporter", foreign_keys="Issue.created_by_id"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
