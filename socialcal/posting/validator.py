"""
Composer content validation.

Each platform has one minimal-content rule. A rule looks at the composer
state and returns None when the platform has what it needs, or the message
to show the user when it does not.

A submission is allowed as soon as one selected platform's rule is
satisfied; platforms that are still missing something fail individually
at dispatch time. When no rule is satisfied the first selected platform's
message is returned.
"""
from typing import Callable, Dict, List, Optional

from .platforms import CHAR_LIMITS, Platform
from .types import ComposerState, ValidationResult

Rule = Callable[[ComposerState], Optional[str]]


def _text_or_media(platform: Platform) -> Rule:
    def rule(state: ComposerState) -> Optional[str]:
        if state.text_for(platform) or state.has_media:
            return None
        return f"Please add some text or media for {platform.label}"
    return rule


def _youtube(state: ComposerState) -> Optional[str]:
    if not state.has_video:
        return "YouTube requires a video file"
    if not (state.youtube_title or "").strip():
        return "Please enter a YouTube video title"
    return None


def _tiktok(state: ComposerState) -> Optional[str]:
    if not state.has_video:
        return "TikTok requires a video file"
    return None


def _pinterest(state: ComposerState) -> Optional[str]:
    if not state.pinterest_board_id:
        return "Please select a Pinterest board"
    if not state.has_image:
        return "Pinterest requires an image"
    return None


def _instagram(state: ComposerState) -> Optional[str]:
    # Stories and feed posts both need media; only the feed shows a caption.
    if state.has_media:
        return None
    if state.instagram_as_story:
        return "Instagram stories require an image or video"
    return "Instagram requires an image or video"


def _threads(state: ComposerState) -> Optional[str]:
    if state.is_thread_mode:
        if any((part or "").strip() for part in state.thread_posts):
            return None
        return "Please add at least one post to your Threads thread"
    return _text_or_media(Platform.THREADS)(state)


RULES: Dict[Platform, Rule] = {
    Platform.TWITTER: _text_or_media(Platform.TWITTER),
    Platform.FACEBOOK: _text_or_media(Platform.FACEBOOK),
    Platform.LINKEDIN: _text_or_media(Platform.LINKEDIN),
    Platform.BLUESKY: _text_or_media(Platform.BLUESKY),
    Platform.THREADS: _threads,
    Platform.INSTAGRAM: _instagram,
    Platform.YOUTUBE: _youtube,
    Platform.TIKTOK: _tiktok,
    Platform.PINTEREST: _pinterest,
}


def validate(state: ComposerState) -> ValidationResult:
    """Decide whether the composer state may be submitted."""
    if not state.platforms:
        return ValidationResult.block("Please select at least one platform")

    messages = [RULES[platform](state) for platform in state.platforms]
    if any(message is None for message in messages):
        return ValidationResult.ok()
    return ValidationResult.block(messages[0])


def character_limit_warnings(state: ComposerState) -> List[str]:
    """Platforms whose text is over their limit. Advisory only."""
    warnings = []
    for platform in state.platforms:
        if platform == Platform.THREADS and state.is_thread_mode:
            texts = state.thread_posts
        else:
            texts = [state.text_for(platform)]
        limit = CHAR_LIMITS[platform]
        if any(len(text or "") > limit for text in texts):
            warnings.append(f"{platform.label} posts are limited to {limit} characters")
    return warnings
