"""
Media upload routes: store composer files in the bucket, remove them again.
"""
from typing import List

from fastapi import APIRouter, Depends, File, Request, UploadFile

from ..auth import AuthUser, get_required_user
from ..config import get_settings
from ..limiter import limiter
from ..logging_config import storage_logger
from ..posting.types import LocalFile
from ..responses import bad_request, server_error
from ..schemas.upload import CleanupRequest, CleanupResponse, UploadResponse
from ..services.storage import StorageClient, StorageError, get_storage
from ..services.uploads import UploadRejected, cleanup_media, store_files

settings = get_settings()

router = APIRouter(prefix="/api/upload", tags=["upload"])


async def read_files(files: List[UploadFile]) -> List[LocalFile]:
    return [
        LocalFile(
            name=f.filename or "upload",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files
    ]


@router.post("", response_model=UploadResponse)
@limiter.limit(settings.upload_rate_limit)
async def upload_media(
    request: Request,
    files: List[UploadFile] = File(...),
    storage: StorageClient = Depends(get_storage),
    current_user: AuthUser = Depends(get_required_user),
):
    """Store images and videos under the caller's folder and return their public URLs"""
    local_files = await read_files(files)
    try:
        stored = store_files(storage, current_user.id, local_files)
    except UploadRejected as e:
        bad_request(str(e), "UPLOAD_REJECTED")

    storage_logger.info("Upload request stored files", user_id=current_user.id, count=len(stored))
    return UploadResponse(files=[s.to_dict() for s in stored])


@router.post("/cleanup", response_model=CleanupResponse)
def cleanup_uploaded_media(
    cleanup: CleanupRequest,
    storage: StorageClient = Depends(get_storage),
    current_user: AuthUser = Depends(get_required_user),
):
    """Remove the caller's objects referenced by public URLs; other URLs are ignored"""
    try:
        removed = cleanup_media(storage, current_user.id, cleanup.urls)
    except StorageError as e:
        storage_logger.error("Cleanup failed", error=e, user_id=current_user.id)
        server_error("Failed to clean up media")
    return CleanupResponse(removed=removed)
