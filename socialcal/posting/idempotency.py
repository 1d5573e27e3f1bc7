"""
Delivery ledger for scheduled posts.

Each (scheduled post, platform, account) delivery is recorded under a
deterministic key, so a post that is picked up again after a crash or a
partial failure is not re-sent to accounts that already have it.
"""
import hashlib
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..logging_config import posting_logger
from ..models import PostAttempt

POSTING = "posting"
POSTED = "posted"
FAILED = "failed"


def idempotency_key(scheduled_post_id: int, platform: str, account_id: str) -> str:
    raw = f"{scheduled_post_id}:{platform}:{account_id}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class AttemptLedger:
    """PostAttempt rows for one scheduled post"""

    def __init__(self, db: Session, scheduled_post_id: int):
        self.db = db
        self.scheduled_post_id = scheduled_post_id

    def _get(self, platform: str, account_id: str) -> Optional[PostAttempt]:
        key = idempotency_key(self.scheduled_post_id, platform, account_id)
        return self.db.query(PostAttempt).filter(PostAttempt.idempotency_key == key).first()

    def posted(self, platform: str, account_id: str) -> Optional[PostAttempt]:
        """The earlier successful attempt, if this delivery already happened"""
        attempt = self._get(platform, account_id)
        if attempt is not None and attempt.status == POSTED:
            return attempt
        return None

    def begin(self, platform: str, account_id: str) -> PostAttempt:
        attempt = self._get(platform, account_id)
        if attempt is None:
            attempt = PostAttempt(
                scheduled_post_id=self.scheduled_post_id,
                platform=platform,
                account_id=account_id,
                idempotency_key=idempotency_key(self.scheduled_post_id, platform, account_id),
                status=POSTING,
            )
            self.db.add(attempt)
        else:
            attempt.status = POSTING
            attempt.error_message = None
        try:
            self.db.commit()
        except IntegrityError:
            # Another run recorded the same delivery first
            self.db.rollback()
            attempt = self._get(platform, account_id)
        self.db.refresh(attempt)
        return attempt

    def succeeded(self, platform: str, account_id: str, platform_post_id: Optional[str] = None):
        attempt = self._get(platform, account_id)
        if attempt is None:
            return
        attempt.status = POSTED
        attempt.platform_post_id = platform_post_id
        attempt.error_message = None
        self.db.commit()

    def failed(self, platform: str, account_id: str, error: str):
        attempt = self._get(platform, account_id)
        if attempt is None:
            return
        attempt.status = FAILED
        attempt.error_message = error
        self.db.commit()
        posting_logger.warning(
            "Delivery failed",
            scheduled_post_id=self.scheduled_post_id,
            platform=platform,
            account_id=account_id,
        )
