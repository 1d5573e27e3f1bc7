"""
Scheduled Post Processing

Publishes scheduled posts whose time has come:
- Picks a small batch of due `pending` posts
- Marks each `posting` while it is dispatched
- Skips accounts that already received the post on an earlier run
- Ends in `posted` (with results, media cleanup) or `failed` (with errors)

Run from the cron route; posts abandoned mid-run are put back by
recover_stuck_posts().
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import get_settings
from ..logging_config import worker_logger
from ..models import ScheduledPost, SocialAccount
from ..models.scheduled_post import FAILED, PENDING, POSTED, POSTING, utc_now
from ..posting.dispatcher import PostingDispatcher
from ..posting.idempotency import AttemptLedger
from ..posting.platforms import parse_platforms
from ..posting.types import AccountRef, PostData, PostResult
from ..services.storage import StorageClient, StorageError
from ..services.uploads import cleanup_media


def due_posts(db: Session, now: datetime, limit: int) -> List[ScheduledPost]:
    return (
        db.query(ScheduledPost)
        .filter(ScheduledPost.status == PENDING, ScheduledPost.scheduled_for <= now)
        .order_by(ScheduledPost.scheduled_for.asc())
        .limit(limit)
        .all()
    )


def failure_summary(results: List[PostResult]) -> str:
    return "; ".join(f"{r.platform}: {r.error}" for r in results if not r.success)


def process_due_posts(
    db: Session,
    dispatcher: PostingDispatcher,
    storage: StorageClient,
    now: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> List[Dict]:
    """
    Publish every due scheduled post in one batch.

    Args:
        db: Database session
        dispatcher: Dispatcher used for every post
        storage: Storage client for media cleanup
        now: Reference time (naive UTC); defaults to the current time
        limit: Batch size; defaults to the configured scheduled_batch_size

    Returns:
        One summary dict per processed post
    """
    settings = get_settings()
    now = now or utc_now()
    posts = due_posts(db, now, limit or settings.scheduled_batch_size)

    if not posts:
        worker_logger.debug("No scheduled posts due")
        return []

    worker_logger.info("Processing scheduled posts", count=len(posts))
    return [process_post(db, post, dispatcher, storage) for post in posts]


def process_post(db: Session, post: ScheduledPost, dispatcher: PostingDispatcher, storage: StorageClient) -> Dict:
    """Publish one scheduled post and record the outcome on it"""
    post.status = POSTING
    db.commit()

    try:
        platforms = parse_platforms(post.platforms or [])
        accounts = [
            AccountRef.from_model(a)
            for a in db.query(SocialAccount)
            .filter(SocialAccount.user_id == post.user_id, SocialAccount.is_active == True)  # noqa: E712
            .order_by(SocialAccount.id)
            .all()
        ]
        post_data = PostData.from_record(
            post.content,
            platforms,
            post.media_urls or [],
            post.platform_content or {},
            post.platform_options or {},
        )
        results = dispatcher.dispatch(post_data, accounts, ledger=AttemptLedger(db, post.id))
    except Exception as e:
        db.rollback()
        post.status = FAILED
        post.error_message = str(e)
        db.commit()
        worker_logger.error("Scheduled post failed", error=e, scheduled_post_id=post.id)
        return {"id": post.id, "status": post.status, "error": post.error_message}

    post.post_results = [r.to_dict() for r in results]

    if results and all(r.success for r in results):
        post.status = POSTED
        post.posted_at = utc_now()
        post.error_message = None
        _cleanup(storage, post)
        worker_logger.info("Scheduled post published", scheduled_post_id=post.id, platforms=post.platforms)
    else:
        post.status = FAILED
        post.error_message = failure_summary(results) or "No platforms to post to"
        worker_logger.warning(
            "Scheduled post failed",
            scheduled_post_id=post.id,
            error_message=post.error_message,
        )

    db.commit()
    return {
        "id": post.id,
        "status": post.status,
        "results": post.post_results,
        "error": post.error_message,
    }


def _cleanup(storage: StorageClient, post: ScheduledPost):
    try:
        removed = cleanup_media(storage, post.user_id, post.media_urls or [])
    except StorageError as e:
        worker_logger.warning("Media cleanup failed", scheduled_post_id=post.id, error_detail=str(e))
        return
    if removed:
        worker_logger.info("Cleaned up media", scheduled_post_id=post.id, removed=removed)


def recover_stuck_posts(db: Session, now: Optional[datetime] = None, minutes: Optional[int] = None) -> int:
    """Put posts left in `posting` for too long back to `pending`"""
    now = now or utc_now()
    cutoff = now - timedelta(minutes=minutes or get_settings().stuck_post_minutes)

    stuck = (
        db.query(ScheduledPost)
        .filter(ScheduledPost.status == POSTING, ScheduledPost.updated_at < cutoff)
        .all()
    )
    for post in stuck:
        post.status = PENDING
    if stuck:
        db.commit()
        worker_logger.warning("Recovered stuck scheduled posts", count=len(stuck), ids=[p.id for p in stuck])
    return len(stuck)
