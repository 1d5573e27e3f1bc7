"""
Posting dispatcher.

Sends one request per (platform, account) to the platform's posting route
and collects a PostResult for each. A failure on one platform is recorded
in its result and never stops the others.
"""
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote, urlparse

from ..config import Settings, get_settings
from ..logging_config import posting_logger
from .cancellation import CancellationToken
from .circuit_breaker import CircuitBreaker, circuit_breaker
from .errors import PlatformPostError, PlatformUnavailable
from .idempotency import AttemptLedger
from .platforms import Platform, is_video_url
from .progress import DONE, FAILED, PROCESSING, UPLOADING
from .rate_limiter import PlatformRateLimiter, rate_limiter
from .transport import PlatformTransport
from .types import AccountRef, LocalFile, PostData, PostResult

ProgressCallback = Callable[..., None]

CANCELLED_MESSAGE = "Cancelled before posting"
THREAD_PART_DELAY_SECONDS = 2


def select_accounts(platform: Platform, accounts: List[AccountRef],
                    selected: Optional[Dict[Platform, List[str]]] = None) -> List[AccountRef]:
    """Explicitly selected accounts, else the primary one, else the first"""
    candidates = [a for a in accounts if a.platform == platform.value and a.is_active]
    if not candidates:
        return []

    wanted = (selected or {}).get(platform) or []
    if wanted:
        chosen = [a for a in candidates if a.id in {str(w) for w in wanted}]
        if chosen:
            return chosen

    primary = [a for a in candidates if a.is_primary]
    return primary[:1] or candidates[:1]


def result_label(platform: Platform, account: AccountRef) -> str:
    if account.account_label:
        return f"{platform.value} ({account.account_label})"
    return platform.value


def _report_platform(platform: Platform, results: List[PostResult], on_progress: ProgressCallback):
    """One terminal update per platform, once every selected account is done"""
    failed = [r for r in results if not r.success]
    if not failed:
        messages = [r.message for r in results if r.message]
        on_progress(platform.value, DONE, message=messages[-1] if messages else None)
    elif len(results) == 1:
        on_progress(platform.value, FAILED, error=failed[0].error)
    else:
        on_progress(platform.value, FAILED, error="; ".join(f"{r.platform}: {r.error}" for r in failed))


class PostingDispatcher:
    def __init__(
        self,
        transport: PlatformTransport,
        breaker: CircuitBreaker = None,
        limiter: PlatformRateLimiter = None,
        settings: Settings = None,
    ):
        self.transport = transport
        self.breaker = breaker or circuit_breaker
        self.limiter = limiter or rate_limiter
        self.settings = settings or get_settings()
        self._posters = {
            Platform.TWITTER: self._post_twitter,
            Platform.FACEBOOK: self._post_facebook,
            Platform.INSTAGRAM: self._post_instagram,
            Platform.LINKEDIN: self._post_linkedin,
            Platform.THREADS: self._post_threads,
            Platform.BLUESKY: self._post_bluesky,
            Platform.PINTEREST: self._post_pinterest,
            Platform.TIKTOK: self._post_tiktok,
            Platform.YOUTUBE: self._post_youtube,
        }

    def dispatch(
        self,
        post_data: PostData,
        accounts: List[AccountRef],
        on_progress: ProgressCallback = None,
        cancel_token: CancellationToken = None,
        ledger: AttemptLedger = None,
    ) -> List[PostResult]:
        """Post to every platform in post_data. Never raises for a platform failure."""
        on_progress = on_progress or _ignore_progress
        results: List[PostResult] = []

        for platform in post_data.platforms:
            chosen = select_accounts(platform, accounts, post_data.selected_accounts)
            if not chosen:
                error = f"{platform.value} account not connected"
                results.append(PostResult(platform.value, False, error=error))
                on_progress(platform.value, FAILED, error=error)
                continue

            platform_results = [
                self._post_one(platform, account, post_data, on_progress, cancel_token, ledger)
                for account in chosen
            ]
            results.extend(platform_results)
            _report_platform(platform, platform_results, on_progress)

        posting_logger.info(
            "Dispatch finished",
            platforms=[p.value for p in post_data.platforms],
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
        )
        return results

    def _post_one(self, platform, account, post_data, on_progress, cancel_token, ledger) -> PostResult:
        label = result_label(platform, account)

        if cancel_token is not None and cancel_token.cancelled:
            return PostResult(label, False, error=CANCELLED_MESSAGE)

        if ledger is not None:
            earlier = ledger.posted(platform.value, account.id)
            if earlier is not None:
                posting_logger.info("Skipping delivery already posted", platform=platform.value, account_id=account.id)
                return PostResult(label, True, post_id=earlier.platform_post_id)
            ledger.begin(platform.value, account.id)

        on_progress(platform.value, UPLOADING)
        poster = self._posters[platform]
        result = self._guarded(
            platform, account, label,
            lambda: poster(account, post_data, lambda message: on_progress(platform.value, PROCESSING, message=message)),
        )

        if ledger is not None:
            if result.success:
                ledger.succeeded(platform.value, account.id, result.post_id)
            else:
                ledger.failed(platform.value, account.id, result.error)
        return result

    def _guarded(self, platform: Platform, account: AccountRef, label: str,
                 call: Callable[[], Tuple[Optional[str], Optional[str]]]) -> PostResult:
        """Run one platform call behind the breaker and rate limiter; capture any failure"""
        try:
            self._check_available(platform, account)
            post_id, message = call()
        except PlatformUnavailable as e:
            posting_logger.warning("Platform call refused", platform=platform.value, reason=str(e))
            return PostResult(label, False, error=str(e))
        except Exception as e:
            self.breaker.record_failure(platform.value)
            posting_logger.error("Platform post failed", error=e, platform=platform.value, account_id=account.id)
            return PostResult(label, False, error=str(e) or "Unknown error")

        self.breaker.record_success(platform.value)
        self.limiter.record(platform.value, account.id)
        return PostResult(label, True, post_id=None if post_id is None else str(post_id), message=message)

    def _check_available(self, platform: Platform, account: AccountRef):
        if not self.breaker.can_call(platform.value):
            wait = self.breaker.retry_in(platform.value) or 0
            raise PlatformUnavailable(
                f"{platform.label} is temporarily unavailable. Try again in {int(wait) + 1} seconds"
            )
        if not self.limiter.can_request(platform.value, account.id):
            minutes = int(self.limiter.reset_in(platform.value, account.id) // 60) + 1
            raise PlatformUnavailable(
                f"{platform.label} rate limit reached. Try again in {minutes} minutes"
            )

    # Special paths

    def upload_youtube(self, video: LocalFile, accounts: List[AccountRef], title: str, description: str = "",
                       tags: List[str] = None, privacy: str = "public",
                       selected: Dict[Platform, List[str]] = None) -> PostResult:
        """Send a local video file to the YouTube upload route"""
        chosen = select_accounts(Platform.YOUTUBE, accounts, selected)
        if not chosen:
            return PostResult(Platform.YOUTUBE.value, False, error="youtube account not connected")
        account = chosen[0]

        def call():
            data = self.transport.post_multipart(
                "/api/media/upload/youtube",
                {
                    "title": title,
                    "description": description or "",
                    "tags": ",".join(tags or []),
                    "privacyStatus": privacy,
                    "accessToken": account.access_token or "",
                },
                [("video", (video.name, video.data, video.content_type))],
                "Failed to upload video to YouTube",
            )
            if data.get("success") is False:
                raise PlatformPostError(data.get("error") or "Failed to upload video to YouTube")
            return (data.get("video") or {}).get("id"), "Video uploaded to YouTube"

        return self._guarded(Platform.YOUTUBE, account, result_label(Platform.YOUTUBE, account), call)

    def post_thread(self, parts: List[str], accounts: List[AccountRef],
                    selected: Dict[Platform, List[str]] = None) -> PostResult:
        """Publish already numbered thread parts as separate Threads posts"""
        chosen = select_accounts(Platform.THREADS, accounts, selected)
        if not chosen:
            return PostResult(Platform.THREADS.value, False, error="threads account not connected")
        account = chosen[0]

        def call():
            data = self.transport.post_json(
                "/api/post/threads/thread-numbered",
                {
                    "userId": account.platform_user_id,
                    "accessToken": account.access_token,
                    "posts": parts,
                    "addNumbers": False,
                    "delaySeconds": THREAD_PART_DELAY_SECONDS,
                },
                "Failed to post thread",
            )
            if data.get("partial"):
                raise PlatformPostError(data.get("message") or "Thread was only partially posted")
            posts = data.get("posts") or []
            first = posts[0] if posts else {}
            post_id = first.get("id") if isinstance(first, dict) else first
            return post_id, f"Thread posted with {len(posts) or len(parts)} posts"

        return self._guarded(Platform.THREADS, account, result_label(Platform.THREADS, account), call)

    # Per-platform posters: (account, data, processing) -> (post_id, message)

    def _post_twitter(self, account, data, processing):
        response = self.transport.post_json("/api/post/twitter", {
            "accessToken": account.access_token,
            "accessSecret": account.access_secret,
            "text": data.text_for(Platform.TWITTER),
            "mediaUrls": data.media_urls,
        }, "Failed to post to X (Twitter)")
        return response.get("id"), None

    def _post_facebook(self, account, data, processing):
        response = self.transport.post_json("/api/post/facebook", {
            "pageId": account.platform_user_id,
            "pageAccessToken": account.access_token,
            "message": data.text_for(Platform.FACEBOOK),
            "mediaUrls": data.media_urls,
        }, "Failed to post to Facebook")
        return response.get("id"), None

    def _post_instagram(self, account, data, processing):
        if not data.media_urls:
            raise PlatformPostError("Instagram posts require an image or video")

        if data.instagram_as_story:
            processing("Publishing Instagram story...")
        elif any(is_video_url(u) for u in data.media_urls):
            processing("Processing Instagram reel (this may take up to 2 minutes)...")

        response = self.transport.post_json("/api/post/instagram", {
            "userId": account.platform_user_id,
            "accessToken": account.access_token,
            "text": data.text_for(Platform.INSTAGRAM),
            "mediaUrls": data.media_urls,
            "isStory": data.instagram_as_story,
        }, "Failed to post to Instagram", timeout=self.settings.instagram_video_timeout_seconds)
        return response.get("id"), "Posted story to Instagram!" if data.instagram_as_story else None

    def _post_linkedin(self, account, data, processing):
        media_url = data.media_urls[0] if data.media_urls else None
        payload = {
            "accessToken": account.access_token,
            "userId": account.platform_user_id,
            "content": data.text_for(Platform.LINKEDIN),
        }
        if media_url:
            payload["mediaUrl"] = media_url
            payload["mediaType"] = "video" if is_video_url(media_url) else "image"
        response = self.transport.post_json("/api/post/linkedin", payload, "Failed to post to LinkedIn")
        return response.get("postId") or response.get("id"), None

    def _post_threads(self, account, data, processing):
        response = self.transport.post_json("/api/post/threads", {
            "userId": account.platform_user_id,
            "accessToken": account.access_token,
            "text": data.text_for(Platform.THREADS),
            "mediaUrl": data.media_urls[0] if data.media_urls else None,
        }, "Failed to post to Threads")
        return response.get("id"), None

    def _post_bluesky(self, account, data, processing):
        response = self.transport.post_json("/api/post/bluesky", {
            "identifier": account.access_token,
            "password": account.access_secret,
            "text": data.text_for(Platform.BLUESKY),
            "mediaUrls": data.media_urls,
        }, "Failed to post to Bluesky")
        return response.get("uri") or response.get("id"), None

    def _post_pinterest(self, account, data, processing):
        image_url = next((u for u in data.media_urls if not is_video_url(u)), None)
        if not image_url:
            raise PlatformPostError("Pinterest requires at least one image")
        if not data.pinterest_board_id:
            raise PlatformPostError("Please select a Pinterest board")

        response = self.transport.post_json("/api/post/pinterest", {
            "accessToken": account.access_token,
            "boardId": data.pinterest_board_id,
            "title": data.pinterest_title or "New Pin",
            "description": data.pinterest_description or data.text_for(Platform.PINTEREST),
            "imageUrl": image_url,
            "link": data.pinterest_link,
        }, "Failed to post to Pinterest")
        return response.get("id"), None

    def _post_tiktok(self, account, data, processing):
        video_url = next((u for u in data.media_urls if is_video_url(u)), None)
        if not video_url:
            raise PlatformPostError("TikTok requires a video to post")

        is_draft = data.tiktok_privacy_level == "SELF_ONLY"
        processing("Sending video to TikTok...")
        response = self.transport.post_json("/api/post/tiktok", {
            "accessToken": account.access_token,
            "content": data.text_for(Platform.TIKTOK),
            "videoUrl": self.tiktok_video_url(video_url),
            "privacyLevel": data.tiktok_privacy_level,
            "options": {
                "disableComment": is_draft,
                "disableDuet": is_draft,
                "disableStitch": is_draft,
                "allowComment": not is_draft,
                "allowDuet": not is_draft,
                "allowStitch": not is_draft,
                "allowDownload": not is_draft,
            },
        }, "Failed to post to TikTok")
        message = "Video sent to your TikTok inbox as a draft" if is_draft else None
        return response.get("publishId") or response.get("id"), message

    def _post_youtube(self, account, data, processing):
        video_url = next((u for u in data.media_urls if is_video_url(u)), None)
        if not video_url:
            raise PlatformPostError("YouTube requires a video to create a post")

        processing("Uploading video to YouTube...")
        response = self.transport.post_json("/api/post/youtube", {
            "accessToken": account.access_token,
            "title": data.youtube_title or data.text_for(Platform.YOUTUBE)[:100] or "New video",
            "description": data.text_for(Platform.YOUTUBE),
            "privacyStatus": data.youtube_privacy,
            "videoUrl": video_url,
        }, "Failed to post to YouTube")
        return response.get("id") or (response.get("video") or {}).get("id"), None

    def tiktok_video_url(self, url: str) -> str:
        """TikTok only pulls from a verified domain; storage URLs go through the media proxy"""
        storage_host = urlparse(self.settings.supabase_url).netloc
        host = urlparse(url).netloc
        if host and (host == storage_host or host.endswith("supabase.co")):
            return f"{self.settings.media_proxy_base_url.rstrip('/')}/api/media/proxy?url={quote(url, safe='')}"
        return url


def _ignore_progress(*args, **kwargs):
    pass
