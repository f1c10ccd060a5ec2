"""
Issue-related SQLAlchemy models.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from community.constants import IssueStatus

from .base import Base

if TYPE_CHECKING:
    from .comment import Comment
    from .user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


issue_watchers = Table(
    "issue_watchers",
    Base.metadata,
    Column("issue_id", ForeignKey("issues.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Issue(Base):
    """
    A reported civic problem.

    Location is stored as two float columns; ``coordinates`` exposes them in
    GeoJSON order (longitude, latitude). Images and history rows belong to
    the issue and are removed with it.
    """
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(512))
    description: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(32), default=IssueStatus.PENDING.value, index=True
    )
    longitude: Mapped[float] = mapped_column(Float, default=0.0)
    latitude: Mapped[float] = mapped_column(Float, default=0.0)
    address: Mapped[str] = mapped_column(String(512), default="")
    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    assigned_to_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    # Relationships
    reporter: Mapped["User"] = relationship(
        "User", back_populates="reported_issues", foreign_keys=[created_by_id]
    )
    assignee: Mapped[Optional["User"]] = relationship("User", foreign_keys=[assigned_to_id])
    watchers: Mapped[List["User"]] = relationship(
        "User", secondary=issue_watchers, order_by="User.id"
    )
    images: Mapped[List["IssueImage"]] = relationship(
        "IssueImage",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueImage.position",
    )
    history: Mapped[List["IssueStatusChange"]] = relationship(
        "IssueStatusChange",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueStatusChange.id",
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="issue", cascade="all, delete-orphan"
    )

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)

    def is_owned_by(self, user_id: int) -> bool:
        return self.created_by_id == user_id

    def add_image(self, url: str, storage_id: str) -> "IssueImage":
        image = IssueImage(url=url, storage_id=storage_id, position=len(self.images))
        self.images.append(image)
        return image


class IssueImage(Base):
    """An uploaded picture attached to an issue, kept in upload order."""

    __tablename__ = "issue_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    issue_id: Mapped[int] = mapped_column(
        ForeignKey("issues.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    url: Mapped[str] = mapped_column(String(1024), default="")
    storage_id: Mapped[str] = mapped_column(String(512), default="")

    issue: Mapped["Issue"] = relationship("Issue", back_populates="images")


class IssueStatusChange(Base):
    """One accepted status transition (audit trail)."""

    __tablename__ = "issue_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    issue_id: Mapped[int] = mapped_column(
        ForeignKey("issues.id", ondelete="CASCADE"), index=True
    )
    from_status: Mapped[str] = mapped_column(String(32))
    to_status: Mapped[str] = mapped_column(String(32))
    changed_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    changed_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    issue: Mapped["Issue"] = relationship("Issue", back_populates="history")
