"""
Scheduled post routes.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import AuthUser, get_required_user
from ..database import get_db
from ..logging_config import api_logger
from ..models import ScheduledPost
from ..models.scheduled_post import CANCELLED, PENDING, STATUSES, as_utc, utc_now
from ..posting.platforms import parse_platforms
from ..posting.reconcile import Reconciler
from ..posting.types import PostData
from ..responses import bad_request, not_found, validation_error
from ..schemas.scheduled_post import ScheduledPostCreate, ScheduledPostResponse, ScheduledPostUpdate

router = APIRouter(prefix="/api/posts", tags=["scheduled posts"])


def check_platforms(values: List[str]):
    if not values:
        validation_error("Select at least one platform", {"field": "platforms"})
    try:
        return parse_platforms(values)
    except ValueError as e:
        validation_error(str(e), {"field": "platforms"})


def get_user_post(db: Session, post_id: int, user_id: str) -> ScheduledPost:
    post = db.query(ScheduledPost).filter(
        ScheduledPost.id == post_id,
        ScheduledPost.user_id == user_id
    ).first()
    if not post:
        not_found("Scheduled post", post_id)
    return post


@router.post("/schedule", response_model=ScheduledPostResponse, status_code=201)
def schedule_post(
    post_data: ScheduledPostCreate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    """Schedule already-uploaded content for later publishing."""
    if not post_data.content or not post_data.platforms or not post_data.scheduled_for:
        bad_request("Missing required fields", "MISSING_FIELDS")

    platforms = check_platforms(post_data.platforms)
    scheduled_for = as_utc(post_data.scheduled_for)
    if scheduled_for <= utc_now():
        bad_request("Scheduled time must be in the future", "INVALID_SCHEDULE_TIME")

    reconciler = Reconciler(db, None, current_user.id)
    post = reconciler.create_scheduled_post(
        PostData.from_record(
            post_data.content,
            platforms,
            post_data.media_urls,
            post_data.platform_content,
            post_data.platform_options,
        ),
        scheduled_for,
    )
    if post_data.draft_id:
        reconciler.delete_draft(post_data.draft_id)

    return post


@router.get("/schedule", response_model=List[ScheduledPostResponse])
def list_scheduled_posts(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    """Caller's scheduled posts, soonest first, optionally filtered by status."""
    query = db.query(ScheduledPost).filter(ScheduledPost.user_id == current_user.id)

    if status:
        if status not in STATUSES:
            validation_error(f"Unknown status '{status}'", {"field": "status"})
        query = query.filter(ScheduledPost.status == status)

    return query.order_by(ScheduledPost.scheduled_for.asc()).all()


@router.get("/scheduled/{post_id}", response_model=ScheduledPostResponse)
def get_scheduled_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    return get_user_post(db, post_id, current_user.id)


@router.patch("/scheduled/{post_id}", response_model=ScheduledPostResponse)
def update_scheduled_post(
    post_id: int,
    post_update: ScheduledPostUpdate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    """Edit a scheduled post. Only pending posts can change."""
    post = get_user_post(db, post_id, current_user.id)
    if post.status != PENDING:
        bad_request(f"Cannot edit a post that is {post.status}", "POST_NOT_EDITABLE")

    update_data = post_update.model_dump(exclude_unset=True)
    if update_data.get("platforms") is not None:
        check_platforms(update_data["platforms"])
    if update_data.get("scheduled_for") is not None:
        update_data["scheduled_for"] = as_utc(update_data["scheduled_for"])
        if update_data["scheduled_for"] <= utc_now():
            bad_request("Scheduled time must be in the future", "INVALID_SCHEDULE_TIME")

    for key, value in update_data.items():
        if value is not None:
            setattr(post, key, value)

    db.commit()
    db.refresh(post)
    return post


@router.delete("/scheduled/{post_id}")
def delete_scheduled_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    """Cancel a pending post; any other post is removed."""
    post = get_user_post(db, post_id, current_user.id)

    if post.status == PENDING:
        post.status = CANCELLED
        db.commit()
        api_logger.info("Scheduled post cancelled", scheduled_post_id=post.id)
        return {"success": True, "status": CANCELLED}

    db.delete(post)
    db.commit()
    return {"success": True, "status": "deleted"}
