"""
Publish workflow: validate, upload, dispatch, reconcile.

One PublishWorkflow serves one submission. Every step reports to the
notifier; a platform failure ends up in the results, never as an exception.
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import Settings, get_settings
from ..logging_config import posting_logger, timed
from ..models.scheduled_post import as_utc, utc_now
from .cancellation import CancellationToken
from .content import number_thread_parts
from .dispatcher import PostingDispatcher
from .notify import Notifier
from .platforms import Platform, is_video_url
from .progress import DONE, FAILED, UPLOADING, ProgressTracker
from .reconcile import Reconciler
from .types import ComposerState, PostData, PostResult
from .uploader import MediaUploader
from .validator import character_limit_warnings, validate

TIMEOUT_TITLE = "Posting is taking longer than expected"
TIMEOUT_DESCRIPTION = (
    "Your post may still complete in the background. "
    "Check your posted history before trying again."
)


@dataclass
class PublishOutcome:
    allowed: bool
    message: Optional[str] = None
    results: List[PostResult] = field(default_factory=list)
    media_urls: List[str] = field(default_factory=list)
    upload_failures: List[str] = field(default_factory=list)
    progress: List[Dict] = field(default_factory=list)
    timed_out: bool = False
    draft_deleted: bool = False
    media_cleaned: int = 0
    error: Optional[str] = None

    @property
    def all_succeeded(self) -> bool:
        return (
            bool(self.results)
            and all(r.success for r in self.results)
            and not self.timed_out
            and self.error is None
        )


@dataclass
class ScheduleOutcome:
    allowed: bool
    message: Optional[str] = None
    scheduled_post_id: Optional[int] = None
    media_urls: List[str] = field(default_factory=list)
    draft_deleted: bool = False
    error: Optional[str] = None


def dispatch_timeout(post_data: PostData, settings: Settings) -> int:
    """Instagram video processing can legitimately take minutes"""
    if Platform.INSTAGRAM in post_data.platforms and any(is_video_url(u) for u in post_data.media_urls):
        return settings.instagram_video_timeout_seconds
    return settings.dispatch_timeout_seconds


class PublishWorkflow:
    def __init__(
        self,
        dispatcher: PostingDispatcher,
        uploader: MediaUploader,
        reconciler: Reconciler,
        notifier: Notifier,
        settings: Settings = None,
    ):
        self.dispatcher = dispatcher
        self.uploader = uploader
        self.reconciler = reconciler
        self.notifier = notifier
        self.settings = settings or get_settings()
        self.is_posting = False
        self.tracker: Optional[ProgressTracker] = None

    @timed(posting_logger)
    def publish(self, state: ComposerState) -> PublishOutcome:
        """Post now to every selected platform."""
        self.is_posting = True
        executor = None
        outcome = PublishOutcome(allowed=True)
        try:
            validation = validate(state)
            if not validation.allowed:
                self.notifier.error(validation.message)
                return PublishOutcome(allowed=False, message=validation.message)

            for warning in character_limit_warnings(state):
                self.notifier.warning(warning)

            accounts = self.reconciler.accounts()
            self.tracker = ProgressTracker([p.value for p in state.platforms], self.notifier)
            self.tracker.start()
            remaining = list(state.platforms)

            youtube_video = next((f for f in state.files if f.is_video), None)
            if Platform.YOUTUBE in remaining and youtube_video is not None:
                self._track(Platform.YOUTUBE, UPLOADING)
                result = self.dispatcher.upload_youtube(
                    youtube_video,
                    accounts,
                    title=state.youtube_title,
                    description=state.youtube_description or state.text_for(Platform.YOUTUBE),
                    tags=state.youtube_tags,
                    privacy=state.youtube_privacy,
                    selected=state.selected_accounts,
                )
                outcome.results.append(result)
                self._track_result(Platform.YOUTUBE, result)
                remaining.remove(Platform.YOUTUBE)

            uploaded: List[str] = []
            outcome.media_urls = list(state.media_urls)
            needs_media = [p for p in remaining if not (p == Platform.THREADS and state.is_thread_mode)]
            if needs_media and state.files:
                report = self.uploader.upload(state.files, self.reconciler.user_id)
                uploaded = report.urls
                outcome.media_urls.extend(uploaded)
                outcome.upload_failures = report.failed

            if state.is_thread_mode and Platform.THREADS in remaining:
                self._track(Platform.THREADS, UPLOADING)
                result = self.dispatcher.post_thread(
                    number_thread_parts(state.thread_posts),
                    accounts,
                    selected=state.selected_accounts,
                )
                outcome.results.append(result)
                self._track_result(Platform.THREADS, result)
                remaining.remove(Platform.THREADS)

            if remaining:
                post_data = PostData.from_state(state, outcome.media_urls, remaining)
                timeout = dispatch_timeout(post_data, self.settings)
                token = CancellationToken()
                executor = ThreadPoolExecutor(max_workers=1)
                future = executor.submit(
                    self.dispatcher.dispatch, post_data, accounts, self.tracker.update_platform, token
                )
                try:
                    outcome.results.extend(future.result(timeout=timeout))
                except FutureTimeout:
                    token.cancel("timeout")
                    outcome.timed_out = True
                    self.notifier.warning(TIMEOUT_TITLE, TIMEOUT_DESCRIPTION)
                    posting_logger.warning(
                        "Dispatch timed out",
                        timeout_seconds=timeout,
                        platforms=[p.value for p in remaining],
                    )

            if not outcome.timed_out:
                self.tracker.finish()

            if outcome.all_succeeded:
                if state.draft_id:
                    outcome.draft_deleted = self.reconciler.delete_draft(state.draft_id)
                if uploaded:
                    outcome.media_cleaned = self.reconciler.cleanup_media(uploaded)

            return outcome
        except Exception as e:
            posting_logger.error("Publish failed", error=e)
            self.notifier.error("Failed to post", str(e))
            outcome.error = str(e)
            outcome.message = f"Failed to post: {e}"
            return outcome
        finally:
            self.is_posting = False
            if executor is not None:
                executor.shutdown(wait=False)
            if self.tracker is not None:
                outcome.progress = self.tracker.to_list()

    def schedule(self, state: ComposerState) -> ScheduleOutcome:
        """Validate and upload now, post later."""
        self.is_posting = True
        try:
            validation = validate(state)
            if not validation.allowed:
                self.notifier.error(validation.message)
                return ScheduleOutcome(allowed=False, message=validation.message)

            if state.scheduled_for is None:
                message = "Please choose when to publish this post"
                self.notifier.error(message)
                return ScheduleOutcome(allowed=False, message=message)

            scheduled_for = as_utc(state.scheduled_for)
            if scheduled_for <= utc_now():
                message = "Scheduled time must be in the future"
                self.notifier.error(message)
                return ScheduleOutcome(allowed=False, message=message)

            media_urls = list(state.media_urls)
            if state.files:
                report = self.uploader.upload(state.files, self.reconciler.user_id)
                media_urls.extend(report.urls)

            post_data = PostData.from_state(state, media_urls, state.platforms)
            post = self.reconciler.create_scheduled_post(post_data, scheduled_for)

            draft_deleted = False
            if state.draft_id:
                draft_deleted = self.reconciler.delete_draft(state.draft_id)

            self.notifier.success("Post scheduled", f"Scheduled for {scheduled_for:%Y-%m-%d %H:%M} UTC")
            return ScheduleOutcome(
                allowed=True,
                scheduled_post_id=post.id,
                media_urls=media_urls,
                draft_deleted=draft_deleted,
            )
        except Exception as e:
            posting_logger.error("Schedule failed", error=e)
            self.notifier.error("Failed to schedule post", str(e))
            return ScheduleOutcome(allowed=True, message=f"Failed to schedule post: {e}", error=str(e))
        finally:
            self.is_posting = False

    def _track(self, platform: Platform, state: str):
        self.tracker.update_platform(platform.value, state)

    def _track_result(self, platform: Platform, result: PostResult):
        if result.success:
            self.tracker.update_platform(platform.value, DONE, message=result.message)
        else:
            self.tracker.update_platform(platform.value, FAILED, error=result.error)
