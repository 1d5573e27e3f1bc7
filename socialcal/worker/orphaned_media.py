"""
Orphaned Media Sweep

Uploads are only removed right away when every platform succeeded, so media
from failed posts, abandoned composers and failed cleanups stays in the
bucket. This sweep deletes objects older than the cutoff that no draft or
scheduled post references.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

from sqlalchemy.orm import Session

from ..config import get_settings
from ..logging_config import worker_logger
from ..models import Draft, ScheduledPost
from ..models.scheduled_post import utc_now
from ..services.storage import StorageClient, StorageError

REMOVE_BATCH_SIZE = 100


def referenced_paths(db: Session, storage: StorageClient) -> Set[str]:
    """Object paths of every media URL held by a draft or scheduled post"""
    paths = set()
    for model in (ScheduledPost, Draft):
        for (media_urls,) in db.query(model.media_urls).all():
            for url in media_urls or []:
                path = storage.path_from_url(url)
                if path:
                    paths.add(path)
    return paths


def cleanup_orphaned_media(
    db: Session,
    storage: StorageClient,
    now: Optional[datetime] = None,
    max_age_hours: Optional[int] = None,
) -> Dict:
    """
    Delete unreferenced objects older than max_age_hours.

    Args:
        db: Database session
        storage: Storage client for the media bucket
        now: Reference time (naive UTC); defaults to the current time
        max_age_hours: Minimum object age; defaults to orphan_media_max_age_hours

    Returns:
        Counts of what was seen and deleted, plus any removal errors
    """
    now = now or utc_now()
    cutoff = now - timedelta(hours=max_age_hours or get_settings().orphan_media_max_age_hours)

    objects = storage.list_objects()
    old = [o for o in objects if o.created_at is not None and o.created_at < cutoff]
    referenced = referenced_paths(db, storage) if old else set()
    orphaned = [o.path for o in old if o.path not in referenced]

    deleted = 0
    errors: List[str] = []
    for start in range(0, len(orphaned), REMOVE_BATCH_SIZE):
        batch = orphaned[start:start + REMOVE_BATCH_SIZE]
        try:
            deleted += storage.remove(batch)
        except StorageError as e:
            worker_logger.error("Orphaned media removal failed", error=e, count=len(batch))
            errors.append(str(e))

    worker_logger.info(
        "Orphaned media sweep finished",
        total=len(objects),
        older_than_cutoff=len(old),
        orphaned=len(orphaned),
        deleted=deleted,
    )
    summary = {
        "total_files": len(objects),
        "older_than_cutoff": len(old),
        "referenced_files": len(referenced),
        "orphaned_files": len(orphaned),
        "deleted": deleted,
    }
    if errors:
        summary["errors"] = errors
    return summary
