from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List, Dict


class DraftBase(BaseModel):
    content: str = ""
    platforms: List[str] = []
    platform_content: Dict[str, str] = {}
    media_urls: List[str] = []
    pinterest_title: Optional[str] = None
    pinterest_description: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DraftCreate(DraftBase):
    title: Optional[str] = None


class DraftUpdate(BaseModel):
    draft_id: int = Field(..., alias="draftId")
    title: Optional[str] = None
    content: Optional[str] = None
    platforms: Optional[List[str]] = None
    platform_content: Optional[Dict[str, str]] = None
    media_urls: Optional[List[str]] = None
    pinterest_title: Optional[str] = None
    pinterest_description: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DraftResponse(BaseModel):
    id: int
    title: str
    content: str
    platforms: List[str] = []
    platform_content: Dict[str, str] = {}
    media_urls: List[str] = []
    pinterest_title: Optional[str] = None
    pinterest_description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
