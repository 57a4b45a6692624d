"""Admin site settings and media upload endpoints"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from driveflow.api.v1.schemas import MediaUploadResponse, SettingsSchema
from driveflow.api.dependencies import CurrentUser, get_request_id, get_storage_client, require_admin
from driveflow.api.errors import raise_http_error
from driveflow.infrastructure.clients.storage import StorageClient
from driveflow.infrastructure.database.session import get_db
from driveflow.infrastructure.database.repositories import SettingsRepository
from driveflow.domain.exceptions import DomainException
from driveflow.domain.models import SiteSettings

router = APIRouter()

MEDIA_FOLDERS = "^(models|units|kyc|safari)$"


@router.get("/settings", response_model=SettingsSchema)
def get_settings(
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        site_settings = SettingsRepository(db).get_settings()
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return SettingsSchema.model_validate(site_settings)


@router.put("/settings", response_model=SettingsSchema)
def update_settings(
    body: SettingsSchema,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Replace the site-wide settings; changes apply to the next quote"""
    try:
        site_settings = SettingsRepository(db).save_settings(SiteSettings(**body.model_dump()))
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return SettingsSchema.model_validate(site_settings)


@router.post("/media", response_model=MediaUploadResponse, status_code=201)
async def upload_media(
    request: Request,
    filename: str = Query(..., min_length=1),
    folder: str = Query(..., pattern=MEDIA_FOLDERS),
    storage: StorageClient = Depends(get_storage_client),
    admin: CurrentUser = Depends(require_admin),
):
    """Store the raw request body as a file and return its public URL"""
    content = await request.body()
    if not content:
        raise HTTPException(status_code=422, detail="Empty upload")

    try:
        url = await storage.upload(content, filename, folder)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return MediaUploadResponse(url=url)
