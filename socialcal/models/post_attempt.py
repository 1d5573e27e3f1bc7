"""
PostAttempt model: one (scheduled post, platform, account) delivery, keyed
for idempotency so a retried run never posts twice.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime, timezone
from ..database import Base


class PostAttempt(Base):
    __tablename__ = "post_attempts"

    id = Column(Integer, primary_key=True, index=True)
    scheduled_post_id = Column(Integer, nullable=False, index=True)
    platform = Column(String(50), nullable=False)
    account_id = Column(String(64), nullable=False)
    idempotency_key = Column(String(64), unique=True, nullable=False, index=True)
    status = Column(String(20), default="posting")  # posting, posted, failed
    platform_post_id = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
