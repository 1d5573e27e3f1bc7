from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List, Dict, Any

from ..posting.platforms import parse_platforms
from ..posting.types import (
    ComposerState,
    LocalFile,
    THREADS_SINGLE,
    THREADS_THREAD,
    TIKTOK_PRIVACY_LEVELS,
    platform_keyed,
)


class ComposerPayload(BaseModel):
    """Composer state as submitted with POST /api/publish and /api/publish/schedule"""
    platforms: List[str] = []
    content: str = ""
    platform_content: Dict[str, str] = {}
    media_urls: List[str] = []
    selected_accounts: Dict[str, List[str]] = {}

    youtube_title: str = ""
    youtube_description: str = ""
    youtube_tags: List[str] = []
    youtube_privacy: str = "public"

    pinterest_board_id: Optional[str] = None
    pinterest_title: Optional[str] = None
    pinterest_description: Optional[str] = None
    pinterest_link: Optional[str] = None

    tiktok_privacy_level: str = "PUBLIC_TO_EVERYONE"
    instagram_as_story: bool = False

    threads_mode: str = THREADS_SINGLE
    thread_posts: List[str] = []

    draft_id: Optional[int] = None
    scheduled_for: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("platforms")
    @classmethod
    def known_platforms(cls, value):
        parse_platforms(value)
        return value

    @field_validator("tiktok_privacy_level")
    @classmethod
    def known_privacy_level(cls, value):
        if value not in TIKTOK_PRIVACY_LEVELS:
            raise ValueError(f"tiktokPrivacyLevel must be one of {', '.join(TIKTOK_PRIVACY_LEVELS)}")
        return value

    @field_validator("threads_mode")
    @classmethod
    def known_threads_mode(cls, value):
        if value not in (THREADS_SINGLE, THREADS_THREAD):
            raise ValueError("threadsMode must be 'single' or 'thread'")
        return value

    def to_state(self, files: List[LocalFile] = None) -> ComposerState:
        return ComposerState(
            platforms=parse_platforms(self.platforms),
            content=self.content,
            platform_content=platform_keyed(self.platform_content),
            media_urls=list(self.media_urls),
            files=list(files or []),
            selected_accounts=platform_keyed(self.selected_accounts),
            youtube_title=self.youtube_title,
            youtube_description=self.youtube_description,
            youtube_tags=list(self.youtube_tags),
            youtube_privacy=self.youtube_privacy,
            pinterest_board_id=self.pinterest_board_id,
            pinterest_title=self.pinterest_title,
            pinterest_description=self.pinterest_description,
            pinterest_link=self.pinterest_link,
            tiktok_privacy_level=self.tiktok_privacy_level,
            instagram_as_story=self.instagram_as_story,
            threads_mode=self.threads_mode,
            thread_posts=list(self.thread_posts),
            draft_id=self.draft_id,
            scheduled_for=self.scheduled_for,
        )


class PublishResponse(BaseModel):
    ok: bool
    blocked: bool = False
    message: Optional[str] = None
    results: List[Dict[str, Any]] = []
    progress: List[Dict[str, Any]] = []
    notices: List[Dict[str, Any]] = []
    media_urls: List[str] = []
    timed_out: bool = False
    draft_deleted: bool = False


class ScheduleResponse(BaseModel):
    ok: bool
    blocked: bool = False
    message: Optional[str] = None
    scheduled_post_id: Optional[int] = None
    media_urls: List[str] = []
    notices: List[Dict[str, Any]] = []
