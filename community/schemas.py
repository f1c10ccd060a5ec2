"""
Pydantic input models accepted by the services.

HTTP routes build these from query strings, form fields or JSON bodies, so
every shape/range rule lives in one place and all violations are reported
together.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from community.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_SEARCH_RADIUS_METERS,
    MIN_PASSWORD_LENGTH,
    IssueStatus,
)


class RegisterRequest(BaseModel):
    username: str = Field(..., max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class IssueCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=512)
    description: str = Field(..., min_length=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=512)


class IssueUpdate(BaseModel):
    """Partial update: only fields that are not None are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=512)
    description: Optional[str] = Field(None, min_length=1)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=512)


class StatusUpdate(BaseModel):
    status: IssueStatus


class CommentCreate(BaseModel):
    text: str


class IssueQuery(BaseModel):
    """
    Search parameters for the public issue listing.

    The geo filter applies only when lng, lat and radius are all present.
    A page past the last one is valid and yields no items.
    """
    model_config = ConfigDict(extra="ignore")

    status: Optional[IssueStatus] = None
    q: Optional[str] = Field(None, max_length=200)
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    radius: Optional[int] = Field(None, ge=1, description="Radius in meters")

    @field_validator("radius")
    @classmethod
    def cap_radius(cls, v: Optional[int]) -> Optional[int]:
        # Anything wider already covers the whole sphere
        if v is None:
            return v
        return min(v, MAX_SEARCH_RADIUS_METERS)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def near(self) -> tuple[float, float, int] | None:
        if self.lng is None or self.lat is None or self.radius is None:
            return None
        return (self.lng, self.lat, self.radius)

    def to_filters(self) -> dict:
        return {
            "status": self.status.value if self.status else None,
            "q": self.q,
            "near": self.near,
        }
