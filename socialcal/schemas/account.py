from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class AccountResponse(BaseModel):
    """Connected account without its credentials"""
    id: int
    platform: str
    platform_user_id: Optional[str] = None
    username: Optional[str] = None
    account_label: Optional[str] = None
    is_active: bool
    is_primary: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
