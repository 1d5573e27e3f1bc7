"""
Per-platform progress bookkeeping for one publish action.
"""
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from .notify import Notice, Notifier, LOADING, INFO, SUCCESS, WARNING, ERROR

PENDING = "pending"
UPLOADING = "uploading"
PROCESSING = "processing"
DONE = "success"
FAILED = "error"

TERMINAL = (DONE, FAILED)


@dataclass
class PlatformStatus:
    platform: str
    state: str = PENDING
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "platform": self.platform,
            "state": self.state,
            "message": self.message,
            "error": self.error,
        }


def _title(platform: str) -> str:
    return platform[:1].upper() + platform[1:]


class ProgressTracker:
    """
    Ordered {platform, state, message} list for the current submission.

    Every change is reported to the notifier; the summary notice shares one
    key so it is updated in place.
    """

    def __init__(self, platforms: List[str], notifier: Notifier):
        self.notifier = notifier
        self.key = f"progress-{id(self)}"
        self._statuses: Dict[str, PlatformStatus] = {p: PlatformStatus(p) for p in platforms}
        self._started_at = time.monotonic()
        self._finished = False

    @property
    def statuses(self) -> List[PlatformStatus]:
        return list(self._statuses.values())

    def start(self):
        count = len(self._statuses)
        self._started_at = time.monotonic()
        self.notifier.notify(Notice(
            LOADING,
            f"Starting to post to {count} platform{'s' if count != 1 else ''}...",
            ", ".join(_title(p) for p in self._statuses),
            key=self.key,
        ))

    def update_platform(self, platform: str, state: str, message: str = None, error: str = None):
        status = self._statuses.get(platform)
        if status is None:
            return

        status.state = state
        status.message = message
        status.error = error
        if state not in TERMINAL:
            # reopened; the next finish() reports again
            self._finished = False

        name = _title(platform)
        if state == UPLOADING:
            self.notifier.notify(Notice(INFO, f"Uploading to {name}..."))
        elif state == PROCESSING:
            self.notifier.notify(Notice(INFO, message or f"Processing {name} post..."))
        elif state == DONE:
            self.notifier.notify(Notice(SUCCESS, message or f"Posted to {name}!"))
        elif state == FAILED:
            self.notifier.notify(Notice(ERROR, f"Failed to post to {name}: {error or 'Unknown error'}"))

        self._update_summary()

    def _update_summary(self):
        statuses = self.statuses
        completed = [s for s in statuses if s.state in TERMINAL]
        if len(completed) == len(statuses):
            self.finish()
            return

        in_progress = [s for s in statuses if s.state in (UPLOADING, PROCESSING)]
        if in_progress:
            succeeded = [s for s in completed if s.state == DONE]
            self.notifier.notify(Notice(
                LOADING,
                f"Posting in progress... ({len(succeeded)}/{len(statuses)} completed)",
                ", ".join(_title(s.platform) for s in in_progress),
                key=self.key,
            ))

    def finish(self):
        if self._finished:
            return
        self._finished = True

        statuses = self.statuses
        succeeded = [s for s in statuses if s.state == DONE]
        failed = [s for s in statuses if s.state == FAILED]
        elapsed = round(time.monotonic() - self._started_at)

        if not failed:
            self.notifier.notify(Notice(
                SUCCESS,
                f"Successfully posted to all {len(succeeded)} platform{'s' if len(succeeded) != 1 else ''}!",
                f"Completed in {elapsed} seconds",
                key=self.key,
            ))
        elif not succeeded:
            self.notifier.notify(Notice(
                ERROR,
                "Failed to post to all platforms",
                "\n".join(f"{s.platform}: {s.error}" for s in failed),
                key=self.key,
            ))
        else:
            self.notifier.notify(Notice(
                WARNING,
                f"Posted to {len(succeeded)}/{len(statuses)} platforms",
                f"Success: {', '.join(_title(s.platform) for s in succeeded)}\n"
                f"Failed: {len(failed)} platform{'s' if len(failed) != 1 else ''}",
                key=self.key,
            ))

    def to_list(self) -> List[Dict]:
        return [s.to_dict() for s in self.statuses]
