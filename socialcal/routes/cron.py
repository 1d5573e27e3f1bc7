"""
Cron entry points: scheduled posts and orphaned media.
"""
import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..dependencies import get_dispatcher
from ..logging_config import worker_logger
from ..posting.dispatcher import PostingDispatcher
from ..responses import server_error, unauthorized
from ..services.storage import StorageClient, StorageError, get_storage
from ..worker.orphaned_media import cleanup_orphaned_media
from ..worker.scheduled_posts import process_due_posts, recover_stuck_posts

router = APIRouter(prefix="/api/cron", tags=["cron"])


def verify_cron_secret(authorization: Optional[str] = Header(None)):
    expected = f"Bearer {get_settings().cron_secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        unauthorized()


@router.get("/process-scheduled-posts", dependencies=[Depends(verify_cron_secret)])
def process_scheduled_posts(
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
    dispatcher: PostingDispatcher = Depends(get_dispatcher),
):
    """Publish due posts; called by the scheduler every minute."""
    recovered = recover_stuck_posts(db)
    results = process_due_posts(db, dispatcher, storage)

    worker_logger.info("Cron run finished", processed=len(results), recovered=recovered)
    return {
        "success": True,
        "processed": len(results),
        "recovered": recovered,
        "results": results,
    }


@router.get("/cleanup-orphaned-media", dependencies=[Depends(verify_cron_secret)])
def cleanup_orphaned_media_route(
    db: Session = Depends(get_db),
    storage: StorageClient = Depends(get_storage),
):
    """Delete old bucket objects no draft or scheduled post references."""
    try:
        summary = cleanup_orphaned_media(db, storage)
    except StorageError as e:
        worker_logger.error("Orphaned media sweep failed", error=e)
        server_error("Failed to list stored media")
    return {"success": True, **summary}
