from .upload import router as upload_router
from .drafts import router as drafts_router
from .schedule import router as schedule_router
from .accounts import router as accounts_router
from .publish import router as publish_router
from .cron import router as cron_router
from .health import router as health_router

__all__ = [
    "upload_router",
    "drafts_router",
    "schedule_router",
    "accounts_router",
    "publish_router",
    "cron_router",
    "health_router",
]
