"""
Request and result records passed through the publish workflow.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .platforms import Platform, is_image_type, is_video_type, is_video_url
from .content import clean_html_content

TIKTOK_PRIVACY_LEVELS = ("PUBLIC_TO_EVERYONE", "MUTUAL_FOLLOW_FRIENDS", "SELF_ONLY")

THREADS_SINGLE = "single"
THREADS_THREAD = "thread"


@dataclass
class LocalFile:
    """A file selected in the composer that has not been uploaded yet"""
    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_video(self) -> bool:
        return is_video_type(self.content_type)

    @property
    def is_image(self) -> bool:
        return is_image_type(self.content_type)


@dataclass
class ComposerState:
    """Everything the composer holds at the moment the user submits"""
    platforms: List[Platform]
    content: str = ""
    platform_content: Dict[Platform, str] = field(default_factory=dict)
    media_urls: List[str] = field(default_factory=list)
    files: List[LocalFile] = field(default_factory=list)
    selected_accounts: Dict[Platform, List[str]] = field(default_factory=dict)

    youtube_title: str = ""
    youtube_description: str = ""
    youtube_tags: List[str] = field(default_factory=list)
    youtube_privacy: str = "public"

    pinterest_board_id: Optional[str] = None
    pinterest_title: Optional[str] = None
    pinterest_description: Optional[str] = None
    pinterest_link: Optional[str] = None

    tiktok_privacy_level: str = "PUBLIC_TO_EVERYONE"
    instagram_as_story: bool = False

    threads_mode: str = THREADS_SINGLE
    thread_posts: List[str] = field(default_factory=list)

    draft_id: Optional[int] = None
    scheduled_for: Optional[datetime] = None

    def text_for(self, platform: Platform) -> str:
        """Plain text that will be sent to a platform (override wins)"""
        return clean_html_content(self.platform_content.get(platform) or self.content)

    @property
    def has_media(self) -> bool:
        return bool(self.files or self.media_urls)

    @property
    def has_video(self) -> bool:
        return any(f.is_video for f in self.files) or any(is_video_url(u) for u in self.media_urls)

    @property
    def has_image(self) -> bool:
        return any(f.is_image for f in self.files) or any(not is_video_url(u) for u in self.media_urls)

    @property
    def is_thread_mode(self) -> bool:
        return Platform.THREADS in self.platforms and self.threads_mode == THREADS_THREAD


@dataclass
class PostData:
    """Normalized input of the posting dispatcher"""
    content: str
    platforms: List[Platform]
    media_urls: List[str] = field(default_factory=list)
    platform_content: Dict[Platform, str] = field(default_factory=dict)
    selected_accounts: Dict[Platform, List[str]] = field(default_factory=dict)
    pinterest_board_id: Optional[str] = None
    pinterest_title: Optional[str] = None
    pinterest_description: Optional[str] = None
    pinterest_link: Optional[str] = None
    tiktok_privacy_level: str = "PUBLIC_TO_EVERYONE"
    instagram_as_story: bool = False
    youtube_title: Optional[str] = None
    youtube_privacy: str = "public"

    @classmethod
    def from_state(cls, state: ComposerState, media_urls: List[str], platforms: List[Platform]) -> "PostData":
        return cls(
            content=state.content,
            platforms=list(platforms),
            media_urls=list(media_urls),
            platform_content=dict(state.platform_content),
            selected_accounts=dict(state.selected_accounts),
            pinterest_board_id=state.pinterest_board_id,
            pinterest_title=state.pinterest_title,
            pinterest_description=state.pinterest_description,
            pinterest_link=state.pinterest_link,
            tiktok_privacy_level=state.tiktok_privacy_level,
            instagram_as_story=state.instagram_as_story,
            youtube_title=state.youtube_title or None,
            youtube_privacy=state.youtube_privacy,
        )

    @classmethod
    def from_record(cls, content: str, platforms: List[Platform], media_urls: List[str],
                    platform_content: Dict[str, str] = None, options: Dict = None) -> "PostData":
        """Rebuild from stored columns (string platform keys, options dict)"""
        options = options or {}
        overrides = platform_keyed(platform_content)
        return cls(
            content=content,
            platforms=list(platforms),
            media_urls=list(media_urls or []),
            platform_content=overrides,
            selected_accounts=platform_keyed(options.get("selected_accounts")),
            pinterest_board_id=options.get("pinterest_board_id"),
            pinterest_title=options.get("pinterest_title"),
            pinterest_description=options.get("pinterest_description"),
            pinterest_link=options.get("pinterest_link"),
            tiktok_privacy_level=options.get("tiktok_privacy_level") or "PUBLIC_TO_EVERYONE",
            instagram_as_story=bool(options.get("instagram_as_story")),
            youtube_title=options.get("youtube_title"),
            youtube_privacy=options.get("youtube_privacy") or "public",
        )

    def text_for(self, platform: Platform) -> str:
        return clean_html_content(self.platform_content.get(platform) or self.content)

    def options(self) -> Dict:
        """Platform-specific fields, as persisted on a scheduled post"""
        return {
            "pinterest_board_id": self.pinterest_board_id,
            "pinterest_title": self.pinterest_title,
            "pinterest_description": self.pinterest_description,
            "pinterest_link": self.pinterest_link,
            "tiktok_privacy_level": self.tiktok_privacy_level,
            "instagram_as_story": self.instagram_as_story,
            "youtube_title": self.youtube_title,
            "youtube_privacy": self.youtube_privacy,
            "selected_accounts": {p.value: list(ids) for p, ids in self.selected_accounts.items()},
        }


@dataclass
class PostResult:
    """Outcome of posting to one platform account"""
    platform: str
    success: bool
    post_id: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {"platform": self.platform, "success": self.success}
        if self.post_id is not None:
            data["postId"] = self.post_id
        if self.error is not None:
            data["error"] = self.error
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass
class AccountRef:
    """Snapshot of a connected account, safe to hand to a worker thread"""
    id: str
    platform: str
    platform_user_id: Optional[str] = None
    username: Optional[str] = None
    account_label: Optional[str] = None
    access_token: Optional[str] = None
    access_secret: Optional[str] = None
    is_active: bool = True
    is_primary: bool = False

    @classmethod
    def from_model(cls, account) -> "AccountRef":
        return cls(
            id=str(account.id),
            platform=account.platform,
            platform_user_id=account.platform_user_id,
            username=account.username,
            account_label=account.account_label,
            access_token=account.access_token,
            access_secret=account.access_secret,
            is_active=bool(account.is_active),
            is_primary=bool(account.is_primary),
        )


@dataclass
class ValidationResult:
    """Whether the composer may submit, and what to tell the user if not"""
    allowed: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(allowed=True)

    @classmethod
    def block(cls, message: str) -> "ValidationResult":
        return cls(allowed=False, message=message)


def platform_keyed(values: Optional[Dict]) -> Dict:
    """String-keyed JSON dict to Platform keys; unknown platforms are dropped"""
    keyed = {}
    for key, value in (values or {}).items():
        try:
            keyed[Platform(key)] = value
        except ValueError:
            continue
    return keyed
