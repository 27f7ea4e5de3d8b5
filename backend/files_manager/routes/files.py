"""Files API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from files_manager.container import Services
from files_manager.dependencies import get_services, optional_owner, require_owner
from files_manager.schemas.base import ErrorResponse
from files_manager.schemas.file import FileCreate, FileResponse
from files_manager.types import OwnerId

router = APIRouter(
    prefix="/files",
    tags=["files"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.post("", response_model=FileResponse, status_code=201, responses={400: {"model": ErrorResponse}})
async def upload_file(
    body: FileCreate,
    owner_id: OwnerId = Depends(require_owner),
    services: Services = Depends(get_services),
):
    """Create a folder, or store a base64-encoded file or image."""
    record = await services.upload.create(
        owner_id,
        name=body.name,
        type=body.type,
        parent_id=body.parent_id,
        is_public=body.is_public,
        data=body.data,
    )
    return FileResponse.from_record(record)


@router.get("", response_model=list[FileResponse])
async def list_files(
    parent_id: Optional[str] = Query("0", alias="parentId"),
    page: Optional[str] = Query("0"),
    owner_id: OwnerId = Depends(require_owner),
    services: Services = Depends(get_services),
):
    """List one page (20 records) of the caller's files under a folder."""
    records = await services.retrieval.list_files(owner_id, parent_id=parent_id, page=page)
    return [FileResponse.from_record(r) for r in records]


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    file_id: str,
    owner_id: OwnerId = Depends(require_owner),
    services: Services = Depends(get_services),
):
    record = await services.retrieval.get_owned(owner_id, file_id)
    return FileResponse.from_record(record)


@router.put("/{file_id}/publish", response_model=FileResponse)
async def publish_file(
    file_id: str,
    owner_id: OwnerId = Depends(require_owner),
    services: Services = Depends(get_services),
):
    record = await services.retrieval.set_public(owner_id, file_id, True)
    return FileResponse.from_record(record)


@router.put("/{file_id}/unpublish", response_model=FileResponse)
async def unpublish_file(
    file_id: str,
    owner_id: OwnerId = Depends(require_owner),
    services: Services = Depends(get_services),
):
    record = await services.retrieval.set_public(owner_id, file_id, False)
    return FileResponse.from_record(record)


@router.get("/{file_id}/data", responses={400: {"model": ErrorResponse}})
async def get_file_data(
    file_id: str,
    size: Optional[str] = Query(None),
    requester: Optional[OwnerId] = Depends(optional_owner),
    services: Services = Depends(get_services),
):
    """Stream a file's bytes. `size` picks an image thumbnail (500, 250 or 100)."""
    content = await services.retrieval.open_content(requester, file_id, size=size)
    return StreamingResponse(content.chunks, media_type=content.content_type)
