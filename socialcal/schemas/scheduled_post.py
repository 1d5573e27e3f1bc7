from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List, Dict, Any


class ScheduledPostCreate(BaseModel):
    content: Optional[str] = None
    platforms: List[str] = []
    platform_content: Dict[str, str] = {}
    media_urls: List[str] = []
    platform_options: Dict[str, Any] = {}
    scheduled_for: Optional[datetime] = None
    draft_id: Optional[int] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ScheduledPostUpdate(BaseModel):
    content: Optional[str] = None
    platforms: Optional[List[str]] = None
    platform_content: Optional[Dict[str, str]] = None
    media_urls: Optional[List[str]] = None
    platform_options: Optional[Dict[str, Any]] = None
    scheduled_for: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ScheduledPostResponse(BaseModel):
    id: int
    content: str
    platforms: List[str] = []
    platform_content: Dict[str, str] = {}
    media_urls: List[str] = []
    platform_options: Dict[str, Any] = {}
    scheduled_for: datetime
    status: str
    post_results: Optional[List[Dict[str, Any]]] = None
    error_message: Optional[str] = None
    posted_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
