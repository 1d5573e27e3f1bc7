"""
User-facing notices raised while a post is being published.

The workflow never talks to a UI directly; it hands Notice records to a
Notifier, and the HTTP layer returns what was collected.
"""
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from ..logging_config import posting_logger

LOADING = "loading"
INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


@dataclass
class Notice:
    level: str
    title: str
    description: Optional[str] = None
    key: Optional[str] = None  # notices sharing a key replace each other

    def to_dict(self) -> Dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


class Notifier:
    """Base sink: logs every notice"""

    def notify(self, notice: Notice):
        level = "warning" if notice.level in (WARNING, ERROR) else "info"
        getattr(posting_logger, level)(notice.title, notice_level=notice.level, description=notice.description)

    def info(self, title: str, description: str = None):
        self.notify(Notice(INFO, title, description))

    def success(self, title: str, description: str = None):
        self.notify(Notice(SUCCESS, title, description))

    def warning(self, title: str, description: str = None):
        self.notify(Notice(WARNING, title, description))

    def error(self, title: str, description: str = None):
        self.notify(Notice(ERROR, title, description))


class CollectingNotifier(Notifier):
    """Keeps notices in order; a keyed notice replaces the previous one"""

    def __init__(self):
        self.notices: List[Notice] = []

    def notify(self, notice: Notice):
        super().notify(notice)
        if notice.key is not None:
            for i, existing in enumerate(self.notices):
                if existing.key == notice.key:
                    self.notices[i] = notice
                    return
        self.notices.append(notice)

    def to_list(self) -> List[Dict]:
        return [n.to_dict() for n in self.notices]
