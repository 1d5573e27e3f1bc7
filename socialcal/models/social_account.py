"""
SocialAccount model: a connected account on one platform.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from datetime import datetime, timezone
from ..database import Base


class SocialAccount(Base):
    __tablename__ = "social_accounts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    platform = Column(String(50), nullable=False, index=True)
    platform_user_id = Column(String(255), nullable=True)  # external account id
    username = Column(String(255), nullable=True)
    account_label = Column(String(100), nullable=True)
    access_token = Column(Text, nullable=True)
    access_secret = Column(Text, nullable=True)  # bluesky app password
    is_active = Column(Boolean, default=True)
    is_primary = Column(Boolean, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
