"""
Draft routes. Drafts are saved composer content with no schedule.
"""
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import AuthUser, get_required_user
from ..database import get_db
from ..logging_config import api_logger
from ..models import Draft
from ..responses import not_found
from ..schemas.draft import DraftCreate, DraftResponse, DraftUpdate

router = APIRouter(prefix="/api/drafts", tags=["drafts"])


def default_title() -> str:
    return f"Draft - {datetime.now(timezone.utc):%Y-%m-%d %H:%M}"


def get_user_draft(db: Session, draft_id: int, user_id: str) -> Draft:
    draft = db.query(Draft).filter(Draft.id == draft_id, Draft.user_id == user_id).first()
    if not draft:
        not_found("Draft", draft_id)
    return draft


@router.get("", response_model=List[DraftResponse])
def list_drafts(
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    """Caller's drafts, most recently edited first."""
    return (
        db.query(Draft)
        .filter(Draft.user_id == current_user.id)
        .order_by(Draft.updated_at.desc(), Draft.id.desc())
        .all()
    )


@router.post("", response_model=DraftResponse, status_code=201)
def create_draft(
    draft_data: DraftCreate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    draft = Draft(
        user_id=current_user.id,
        title=(draft_data.title or "").strip() or default_title(),
        content=draft_data.content,
        platforms=draft_data.platforms,
        platform_content=draft_data.platform_content,
        media_urls=draft_data.media_urls,
        pinterest_title=draft_data.pinterest_title,
        pinterest_description=draft_data.pinterest_description,
    )
    db.add(draft)
    db.commit()
    db.refresh(draft)

    api_logger.info("Draft created", draft_id=draft.id, user_id=current_user.id)
    return draft


@router.patch("", response_model=DraftResponse)
def update_draft(
    draft_update: DraftUpdate,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    """Update the draft named by `draftId` in the body."""
    draft = get_user_draft(db, draft_update.draft_id, current_user.id)

    update_data = draft_update.model_dump(exclude_unset=True, exclude={"draft_id"})
    for key, value in update_data.items():
        if value is not None:
            setattr(draft, key, value)

    db.commit()
    db.refresh(draft)
    return draft


@router.delete("")
def delete_draft(
    id: int = Query(..., description="Draft id"),
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    draft = get_user_draft(db, id, current_user.id)
    db.delete(draft)
    db.commit()
    return {"success": True}
