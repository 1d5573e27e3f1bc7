"""
Connected social accounts. Tokens are never returned.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import AuthUser, get_required_user
from ..database import get_db
from ..models import SocialAccount
from ..schemas.account import AccountResponse

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=List[AccountResponse])
def list_accounts(
    platform: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: AuthUser = Depends(get_required_user),
):
    query = db.query(SocialAccount).filter(
        SocialAccount.user_id == current_user.id,
        SocialAccount.is_active == True  # noqa: E712
    )
    if platform:
        query = query.filter(SocialAccount.platform == platform)
    return query.order_by(SocialAccount.platform, SocialAccount.id).all()
