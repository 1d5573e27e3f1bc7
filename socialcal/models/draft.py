"""
Draft model: unsent, unscheduled post content saved for later editing.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime, timezone
from ..database import Base


class Draft(Base):
    __tablename__ = "drafts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    platforms = Column(JSON, default=list)
    platform_content = Column(JSON, default=dict)  # platform -> override
    media_urls = Column(JSON, default=list)
    pinterest_title = Column(String(100), nullable=True)
    pinterest_description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
