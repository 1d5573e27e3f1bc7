"""
ScheduledPost model: post content with a publish time and lifecycle status.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime, timezone
from ..database import Base

PENDING = "pending"
POSTING = "posting"
POSTED = "posted"
FAILED = "failed"
CANCELLED = "cancelled"
PROCESSING = "processing"

STATUSES = (PENDING, POSTING, POSTED, FAILED, CANCELLED, PROCESSING)


def utc_now() -> datetime:
    """Naive UTC, the form scheduled_for is stored and compared in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ScheduledPost(Base):
    __tablename__ = "scheduled_posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    content = Column(Text, nullable=False)
    platforms = Column(JSON, default=list)
    platform_content = Column(JSON, default=dict)
    media_urls = Column(JSON, default=list)
    platform_options = Column(JSON, default=dict)  # pinterest board/title, tiktok privacy, ...
    scheduled_for = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), default=PENDING, index=True)
    post_results = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    posted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)
