"""
Supported platforms and their content constraints.
"""
from enum import Enum
from typing import Dict, Iterable, List


class Platform(Enum):
    """Platforms a post can be published to"""
    TWITTER = "twitter"
    INSTAGRAM = "instagram"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    THREADS = "threads"
    BLUESKY = "bluesky"
    PINTEREST = "pinterest"

    @property
    def label(self) -> str:
        return PLATFORM_LABELS[self]


PLATFORM_LABELS: Dict[Platform, str] = {
    Platform.TWITTER: "X (Twitter)",
    Platform.INSTAGRAM: "Instagram",
    Platform.FACEBOOK: "Facebook",
    Platform.LINKEDIN: "LinkedIn",
    Platform.YOUTUBE: "YouTube",
    Platform.TIKTOK: "TikTok",
    Platform.THREADS: "Threads",
    Platform.BLUESKY: "Bluesky",
    Platform.PINTEREST: "Pinterest",
}

CHAR_LIMITS: Dict[Platform, int] = {
    Platform.TWITTER: 280,
    Platform.INSTAGRAM: 2200,
    Platform.FACEBOOK: 63206,
    Platform.LINKEDIN: 3000,
    Platform.YOUTUBE: 5000,
    Platform.TIKTOK: 2200,
    Platform.THREADS: 500,
    Platform.BLUESKY: 300,
    Platform.PINTEREST: 500,
}

VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi", ".webm", ".mkv", ".m4v")

IMAGE_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")
VIDEO_MIME_TYPES = (
    "video/mp4",
    "video/quicktime",
    "video/x-msvideo",
    "video/webm",
    "video/x-flv",
    "video/x-matroska",
)

MAX_IMAGE_BYTES = 50 * 1024 * 1024
MAX_VIDEO_BYTES = 500 * 1024 * 1024


def parse_platforms(values: Iterable[str]) -> List[Platform]:
    """Map platform ids to Platform members, keeping order and dropping duplicates.

    Raises ValueError on an unknown id.
    """
    platforms: List[Platform] = []
    for value in values:
        platform = Platform(str(value).strip().lower())
        if platform not in platforms:
            platforms.append(platform)
    return platforms


def is_video_url(url: str) -> bool:
    """Hosted media is classified by extension, query strings included"""
    lowered = (url or "").lower()
    return any(ext in lowered for ext in VIDEO_EXTENSIONS)


def is_video_type(content_type: str) -> bool:
    return (content_type or "").lower().startswith("video/")


def is_image_type(content_type: str) -> bool:
    return (content_type or "").lower().startswith("image/")
