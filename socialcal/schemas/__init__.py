from .draft import DraftCreate, DraftUpdate, DraftResponse
from .scheduled_post import ScheduledPostCreate, ScheduledPostUpdate, ScheduledPostResponse
from .account import AccountResponse
from .publish import ComposerPayload, PublishResponse, ScheduleResponse
from .upload import UploadedFile, UploadResponse, CleanupRequest, CleanupResponse

__all__ = [
    "DraftCreate", "DraftUpdate", "DraftResponse",
    "ScheduledPostCreate", "ScheduledPostUpdate", "ScheduledPostResponse",
    "AccountResponse",
    "ComposerPayload", "PublishResponse", "ScheduleResponse",
    "UploadedFile", "UploadResponse", "CleanupRequest", "CleanupResponse",
]
