"""
Database side effects of a publish or schedule action.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..logging_config import posting_logger
from ..models import Draft, ScheduledPost, SocialAccount
from ..models.scheduled_post import PENDING
from ..services.storage import StorageClient, StorageError
from ..services.uploads import cleanup_media
from .types import AccountRef, PostData


class Reconciler:
    """Draft removal, media cleanup and scheduling for one user"""

    def __init__(self, db: Session, storage: StorageClient, user_id: str):
        self.db = db
        self.storage = storage
        self.user_id = user_id

    def accounts(self) -> List[AccountRef]:
        rows = (
            self.db.query(SocialAccount)
            .filter(SocialAccount.user_id == self.user_id, SocialAccount.is_active == True)  # noqa: E712
            .order_by(SocialAccount.id)
            .all()
        )
        return [AccountRef.from_model(row) for row in rows]

    def delete_draft(self, draft_id: int) -> bool:
        draft = self.db.query(Draft).filter(Draft.id == draft_id, Draft.user_id == self.user_id).first()
        if not draft:
            return False
        self.db.delete(draft)
        self.db.commit()
        posting_logger.info("Deleted published draft", draft_id=draft_id)
        return True

    def cleanup_media(self, urls: List[str]) -> int:
        """Remove uploaded objects; a storage failure leaves them for the orphan sweep"""
        try:
            return cleanup_media(self.storage, self.user_id, urls)
        except StorageError as e:
            posting_logger.warning("Media cleanup failed", error=str(e), count=len(urls))
            return 0

    def create_scheduled_post(self, post_data: PostData, scheduled_for: datetime,
                              content: Optional[str] = None) -> ScheduledPost:
        post = ScheduledPost(
            user_id=self.user_id,
            content=content if content is not None else post_data.content,
            platforms=[p.value for p in post_data.platforms],
            platform_content={p.value: text for p, text in post_data.platform_content.items()},
            media_urls=list(post_data.media_urls),
            platform_options=post_data.options(),
            scheduled_for=scheduled_for,
            status=PENDING,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        posting_logger.info("Scheduled post", scheduled_post_id=post.id, scheduled_for=scheduled_for.isoformat())
        return post
