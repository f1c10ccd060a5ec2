"""
Issue repository: persistence plus the search query builder.
"""

import re

from sqlalchemy import and_, case, func, literal, or_, true
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from community.constants import EARTH_RADIUS_METERS
from community.models import Issue, User

from .base import BaseRepository

_TERM_SPLIT = re.compile(r"\s+")


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def search_terms(q: str | None) -> list[str]:
    """Split free text into unique lowercase terms, keeping first-seen order."""
    if not q:
        return []
    seen: dict[str, None] = {}
    for term in _TERM_SPLIT.split(q.strip().lower()):
        if term:
            seen.setdefault(term, None)
    return list(seen)


def haversine_distance(longitude: float, latitude: float) -> ColumnElement[float]:
    """
    Great-circle distance in meters between each issue and a point.

    Built from radians/sin/cos/sqrt/asin so it runs on PostgreSQL as-is and on
    SQLite once ``community.db.configure_sqlite`` has registered those functions.
    The asin argument is capped at 1 in SQL because rounding can push it just
    past the domain for near-antipodal points, which PostgreSQL rejects.
    """
    lat1 = func.radians(literal(latitude))
    lat2 = func.radians(Issue.latitude)
    half_dlat = func.radians(Issue.latitude - literal(latitude)) / 2
    half_dlng = func.radians(Issue.longitude - literal(longitude)) / 2

    sin_dlat = func.sin(half_dlat)
    sin_dlng = func.sin(half_dlng)
    a = sin_dlat * sin_dlat + func.cos(lat1) * func.cos(lat2) * sin_dlng * sin_dlng
    root = func.sqrt(a)
    return 2 * EARTH_RADIUS_METERS * func.asin(case((root > 1.0, literal(1.0)), else_=root))


class IssueRepository(BaseRepository[Issue]):
    """
    Repository for Issue operations.

    ``search`` mirrors what a document store with text and 2dsphere indexes
    would do: status equality, OR-ed term matching ranked by relevance, and a
    radius filter ordered nearest-first.
    """

    model = Issue

    def get_by_id(self, issue_id: int) -> Issue | None:  # type: ignore[override]
        return self.session.get(Issue, issue_id)

    def get_detail(self, issue_id: int) -> Issue | None:
        """Get an issue with reporter, images, watchers and history eagerly loaded."""
        return (
            self.session.query(Issue)
            .options(
                selectinload(Issue.reporter),
                selectinload(Issue.images),
                selectinload(Issue.watchers),
                selectinload(Issue.history),
            )
            .filter(Issue.id == issue_id)
            .first()
        )

    def watcher_emails(self, issue: Issue) -> set[str]:
        return {watcher.email for watcher in issue.watchers if watcher.email}

    def search(
        self,
        filters: dict,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Issue], int]:
        """
        Filter, rank and paginate issues.

        Args:
            filters: Filter dictionary with keys:
                - status: exact status match
                - q: free text matched against title and description
                - near: (longitude, latitude, radius_meters) tuple
            offset: Pagination offset
            limit: Pagination limit

        Returns:
            Tuple of (issues for the page, total matching issues)
        """
        conditions = []

        if filters.get("status"):
            conditions.append(Issue.status == filters["status"])

        terms = search_terms(filters.get("q"))
        relevance = None
        if terms:
            term_matches = []
            scores = []
            for term in terms:
                pattern = _like_pattern(term)
                in_title = Issue.title.ilike(pattern, escape="\\")
                in_description = Issue.description.ilike(pattern, escape="\\")
                term_matches.append(or_(in_title, in_description))
                scores.append(case((in_title, 1), else_=0) + case((in_description, 1), else_=0))
            conditions.append(or_(*term_matches))
            relevance = sum(scores[1:], scores[0])

        distance = None
        near = filters.get("near")
        if near is not None:
            longitude, latitude, radius = near
            distance = haversine_distance(longitude, latitude)
            conditions.append(distance <= radius)

        where = and_(true(), *conditions)

        total = self.session.query(func.count(Issue.id)).filter(where).scalar() or 0
        if offset >= total:
            return [], total

        query = (
            self.session.query(Issue)
            .options(selectinload(Issue.images), selectinload(Issue.watchers), selectinload(Issue.history))
            .filter(where)
        )

        if distance is not None:
            query = query.order_by(distance.asc(), Issue.id.asc())
        elif relevance is not None:
            query = query.order_by(relevance.desc(), Issue.created_at.desc(), Issue.id.desc())
        else:
            query = query.order_by(Issue.created_at.desc(), Issue.id.desc())

        issues = query.offset(offset).limit(limit).all()
        return issues, total

    def add_watcher(self, issue: Issue, user: User) -> bool:
        """Add a watcher; returns False when already watching."""
        if any(w.id == user.id for w in issue.watchers):
            return False
        issue.watchers.append(user)
        self.session.flush()
        return True

    def remove_watcher(self, issue: Issue, user_id: int) -> bool:
        for watcher in list(issue.watchers):
            if watcher.id == user_id:
                issue.watchers.remove(watcher)
                self.session.flush()
                return True
        return False
