"""
Pydantic schemas for API responses.

Request bodies are validated by the models in ``community.schemas``.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str


class AuthResponse(UserResponse):
    token: str


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str


class ImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    url: str
    storage_id: str


class LocationResponse(BaseModel):
    type: str = "Point"
    coordinates: list[float] = Field(..., description="[longitude, latitude]")
    address: str = ""


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    from_status: str
    to_status: str
    changed_at: datetime
    changed_by: int | None = None


class IssueResponse(BaseModel):
    id: int
    title: str
    description: str
    status: str
    images: list[ImageResponse] = Field(default_factory=list)
    location: LocationResponse
    created_by: int
    assigned_to: int | None = None
    watchers: list[int] = Field(default_factory=list)
    history: list[HistoryEntryResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class IssueDetailResponse(IssueResponse):
    reporter: UserSummary | None = None


class IssuePageResponse(BaseModel):
    items: list[IssueResponse]
    page: int
    limit: int
    total: int
    page_count: int


class CommentResponse(BaseModel):
    id: int
    issue_id: int
    author_id: int
    author_username: str | None = None
    text: str
    created_at: datetime


class MessageResponse(BaseModel):
    message: str
