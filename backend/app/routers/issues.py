"""
Issue reporting, search and lifecycle endpoints.
"""

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from starlette.datastructures import UploadFile as StarletteUploadFile

from community.exceptions import ValidationError
from community.schemas import IssueCreate, IssueQuery, IssueUpdate, StatusUpdate
from community.services import ImageUpload, IssueService, Principal

from ..auth.dependencies import get_current_principal, require_admin
from ..dependencies import get_issue_service
from ..schemas import IssueDetailResponse, IssuePageResponse, IssueResponse, MessageResponse
from ..services.serializers import issue_detail_to_dict, issue_to_dict

router = APIRouter(prefix="/issues", tags=["issues"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")
UPDATABLE_FIELDS = ("title", "description", "lat", "lng", "address")


def _read_uploads(files: list[UploadFile] | None) -> list[ImageUpload]:
    uploads = []
    for upload in files or []:
        # Browsers send an empty part when no file was picked
        if not upload.filename:
            continue
        uploads.append(
            ImageUpload(
                filename=upload.filename,
                content=upload.file.read(),
                content_type=upload.content_type or "",
            )
        )
    return uploads


async def _read_form_uploads(files: list) -> list[ImageUpload]:
    uploads = []
    for upload in files:
        if not isinstance(upload, StarletteUploadFile) or not upload.filename:
            continue
        uploads.append(
            ImageUpload(
                filename=upload.filename,
                content=await upload.read(),
                content_type=upload.content_type or "",
            )
        )
    return uploads


async def get_issue_changes(request: Request) -> tuple[IssueUpdate, list[ImageUpload]]:
    """
    Read a partial update from a JSON body or from form fields plus ``images`` files.

    Any other body type is rejected so a client never gets a silent no-op update.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    if content_type == "application/json":
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError.for_field("body", "Request body is not valid JSON")
        if not isinstance(body, dict):
            raise ValidationError.for_field("body", "Request body must be a JSON object")
        return IssueUpdate.model_validate(body), []

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        fields = {key: form.get(key) for key in UPDATABLE_FIELDS}
        changes = IssueUpdate.model_validate(
            {key: value for key, value in fields.items() if isinstance(value, str) and value != ""}
        )
        return changes, await _read_form_uploads(form.getlist("images"))

    raise ValidationError.for_field(
        "body", "Send changes as application/json, multipart/form-data or application/x-www-form-urlencoded"
    )


def get_issue_query(
    status: str | None = Query(None, description="pending | in-progress | resolved"),
    q: str | None = Query(None, description="Free text matched against title and description"),
    page: str | None = Query(None, description="Page number, starting at 1"),
    limit: str | None = Query(None, description="Page size, 1 to 100"),
    lng: str | None = Query(None),
    lat: str | None = Query(None),
    radius: str | None = Query(None, description="Radius in meters"),
) -> IssueQuery:
    """
    Parse listing parameters in one pass so every bad field is reported at once.

    Raw strings go straight to ``IssueQuery``; its validation errors are
    mapped to 400 by the exception handlers.
    """
    raw = {"status": status, "q": q, "page": page, "limit": limit, "lng": lng, "lat": lat, "radius": radius}
    return IssueQuery(**{key: value for key, value in raw.items() if value not in (None, "")})


@router.get("", response_model=IssuePageResponse)
def list_issues(
    query: IssueQuery = Depends(get_issue_query),
    issue_service: IssueService = Depends(get_issue_service),
):
    """Search issues by status, text and distance. Public."""
    result = issue_service.search(query)
    return IssuePageResponse(
        items=[IssueResponse(**issue_to_dict(issue)) for issue in result["items"]],
        page=result["page"],
        limit=result["limit"],
        total=result["total"],
        page_count=result["page_count"],
    )


@router.post("", response_model=IssueResponse, status_code=status.HTTP_201_CREATED)
def create_issue(
    title: str | None = Form(None),
    description: str | None = Form(None),
    lat: float | None = Form(None),
    lng: float | None = Form(None),
    address: str | None = Form(None),
    images: list[UploadFile] | None = File(None),
    principal: Principal = Depends(get_current_principal),
    issue_service: IssueService = Depends(get_issue_service),
):
    draft = IssueCreate(title=title, description=description, lat=lat, lng=lng, address=address)
    issue = issue_service.create(principal, draft, _read_uploads(images))
    return IssueResponse(**issue_to_dict(issue))


@router.get("/{issue_id}", response_model=IssueDetailResponse)
def get_issue(
    issue_id: int,
    issue_service: IssueService = Depends(get_issue_service),
):
    issue = issue_service.get(issue_id)
    return IssueDetailResponse(**issue_detail_to_dict(issue))


@router.patch("/{issue_id}", response_model=IssueResponse)
def update_issue(
    issue_id: int,
    principal: Principal = Depends(get_current_principal),
    update: tuple[IssueUpdate, list[ImageUpload]] = Depends(get_issue_changes),
    issue_service: IssueService = Depends(get_issue_service),
):
    """Partially update an issue from JSON or multipart form data. Owner or admin only."""
    changes, uploads = update
    issue = issue_service.update(principal, issue_id, changes, uploads)
    return IssueResponse(**issue_to_dict(issue))


@router.patch("/{issue_id}/status", response_model=IssueResponse)
def change_issue_status(
    issue_id: int,
    request: StatusUpdate,
    principal: Principal = Depends(require_admin),
    issue_service: IssueService = Depends(get_issue_service),
):
    """Move an issue to another status and email its watchers. Admin only."""
    issue = issue_service.change_status(principal, issue_id, request)
    return IssueResponse(**issue_to_dict(issue))


@router.delete("/{issue_id}", response_model=MessageResponse)
def delete_issue(
    issue_id: int,
    principal: Principal = Depends(get_current_principal),
    issue_service: IssueService = Depends(get_issue_service),
):
    issue_service.delete(principal, issue_id)
    return MessageResponse(message="Issue deleted")


@router.post("/{issue_id}/watchers", response_model=IssueResponse)
def watch_issue(
    issue_id: int,
    principal: Principal = Depends(get_current_principal),
    issue_service: IssueService = Depends(get_issue_service),
):
    issue = issue_service.watch(principal, issue_id)
    return IssueResponse(**issue_to_dict(issue))


@router.delete("/{issue_id}/watchers", response_model=IssueResponse)
def unwatch_issue(
    issue_id: int,
    principal: Principal = Depends(get_current_principal),
    issue_service: IssueService = Depends(get_issue_service),
):
    issue = issue_service.unwatch(principal, issue_id)
    return IssueResponse(**issue_to_dict(issue))
