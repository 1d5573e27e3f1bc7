"""
Media upload service behind POST /api/upload and the media cleanup route.
"""
from dataclasses import dataclass
from typing import List

from ..logging_config import storage_logger
from ..posting.platforms import MAX_IMAGE_BYTES, MAX_VIDEO_BYTES, IMAGE_MIME_TYPES, VIDEO_MIME_TYPES
from ..posting.types import LocalFile
from .storage import StorageClient, StorageError, object_path


class UploadRejected(ValueError):
    """The request as a whole cannot be stored"""


@dataclass
class StoredFile:
    url: str
    path: str
    name: str
    type: str
    size: int

    def to_dict(self):
        return {"url": self.url, "path": self.path, "name": self.name, "type": self.type, "size": self.size}


def check_file(file: LocalFile):
    """Raise UploadRejected when a file is too large; return False for an unsupported type"""
    if file.content_type not in IMAGE_MIME_TYPES and file.content_type not in VIDEO_MIME_TYPES:
        return False
    limit = MAX_VIDEO_BYTES if file.content_type in VIDEO_MIME_TYPES else MAX_IMAGE_BYTES
    if file.size > limit:
        raise UploadRejected(
            f"File {file.name} is too large. Max size: {limit // (1024 * 1024)}MB"
        )
    return True


def store_files(storage: StorageClient, user_id: str, files: List[LocalFile]) -> List[StoredFile]:
    """
    Store files under the user's folder.

    Unsupported types and individual storage failures are skipped; an
    oversized file rejects the whole request. Raises UploadRejected when
    nothing could be stored.
    """
    if not files:
        raise UploadRejected("No files provided")

    for file in files:
        check_file(file)

    stored = []
    for file in files:
        if not check_file(file):
            storage_logger.warning("Skipping unsupported file type", file=file.name, content_type=file.content_type)
            continue

        path = object_path(user_id, file.name)
        try:
            url = storage.upload(path, file.data, file.content_type)
        except StorageError as e:
            storage_logger.error("Failed to store file", error=e, file=file.name)
            continue

        stored.append(StoredFile(url=url, path=path, name=file.name, type=file.content_type, size=file.size))

    if not stored:
        raise UploadRejected("Failed to upload files")
    return stored


def cleanup_media(storage: StorageClient, user_id: str, urls: List[str]) -> int:
    """Remove the user's own objects referenced by public URLs"""
    paths = []
    for url in urls:
        path = storage.path_from_url(url)
        if path and path.startswith(f"{user_id}/"):
            paths.append(path)

    if not paths:
        return 0
    return storage.remove(paths)
