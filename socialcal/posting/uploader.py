"""
Moves composer files into storage before they are posted.

Videos go straight to the bucket one by one; a set of images goes through
the same batch upload service as POST /api/upload.
"""
from dataclasses import dataclass, field
from typing import Callable, List

from ..logging_config import storage_logger
from ..services.storage import StorageClient, StorageError, object_path
from ..services.uploads import StoredFile, UploadRejected, store_files
from .notify import Notifier
from .types import LocalFile

BatchUpload = Callable[[StorageClient, str, List[LocalFile]], List[StoredFile]]


@dataclass
class UploadReport:
    urls: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class MediaUploader:
    def __init__(self, storage: StorageClient, notifier: Notifier, batch_upload: BatchUpload = store_files):
        self.storage = storage
        self.notifier = notifier
        self.batch_upload = batch_upload

    def upload(self, files: List[LocalFile], user_id: str) -> UploadReport:
        report = UploadReport()
        if not files:
            return report

        if any(f.is_video for f in files):
            for file in files:
                self._upload_direct(file, user_id, report)
        else:
            self._upload_batch(files, user_id, report)

        storage_logger.info("Media upload finished", uploaded=len(report.urls), failed=len(report.failed))
        return report

    def _upload_direct(self, file: LocalFile, user_id: str, report: UploadReport):
        try:
            url = self.storage.upload(object_path(user_id, file.name), file.data, file.content_type)
        except StorageError as e:
            report.failed.append(file.name)
            self.notifier.error(f"Failed to upload {file.name}", str(e))
            return
        report.urls.append(url)
        self.notifier.success(f"Uploaded {file.name}")

    def _upload_batch(self, files: List[LocalFile], user_id: str, report: UploadReport):
        try:
            stored = self.batch_upload(self.storage, user_id, files)
        except UploadRejected as e:
            report.failed.extend(f.name for f in files)
            self.notifier.error("Failed to upload media", str(e))
            return

        stored_names = set()
        for item in stored:
            report.urls.append(item.url)
            stored_names.add(item.name)

        for file in files:
            if file.name in stored_names:
                self.notifier.success(f"Uploaded {file.name}")
            else:
                report.failed.append(file.name)
                self.notifier.error(f"Failed to upload {file.name}")
