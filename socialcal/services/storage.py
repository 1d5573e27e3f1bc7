"""
Object storage client for the backend-as-a-service `post-media` bucket.

Only the handful of storage REST calls the publish flow needs: upload an
object, build its public URL, list and remove objects.
"""
import random
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import requests

from ..config import get_settings
from ..logging_config import storage_logger


class StorageError(Exception):
    """The storage service refused or failed a request"""


@dataclass
class StoredObject:
    path: str
    created_at: Optional[datetime] = None  # naive UTC
    size: Optional[int] = None


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def object_path(user_id: str, filename: str) -> str:
    """`{user_id}/{millis}-{random}.{ext}`, unique per upload"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"{user_id}/{int(time.time() * 1000)}-{suffix}.{ext}"


class StorageClient:
    """Bucket-scoped client using the service key"""

    def __init__(self, base_url: str, service_key: str, bucket: str, session: requests.Session = None, timeout: int = 300):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        })

    @property
    def public_prefix(self) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/"

    def public_url(self, path: str) -> str:
        return f"{self.public_prefix}{path}"

    def path_from_url(self, url: str) -> Optional[str]:
        """Object path for a public URL of this bucket, else None"""
        marker = f"/storage/v1/object/public/{self.bucket}/"
        if not url or marker not in url:
            return None
        path = url.split(marker, 1)[1].split("?", 1)[0]
        return path or None

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store an object and return its public URL"""
        try:
            response = self.session.post(
                f"{self.base_url}/storage/v1/object/{self.bucket}/{path}",
                data=data,
                headers={
                    "Content-Type": content_type,
                    "Cache-Control": "max-age=3600",
                    "x-upsert": "false",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StorageError(f"Upload failed: {e}") from e

        if not response.ok:
            storage_logger.warning("Storage upload rejected", path=path, status_code=response.status_code)
            raise StorageError(f"Upload failed with status {response.status_code}")

        storage_logger.info("Stored object", path=path, size=len(data))
        return self.public_url(path)

    def list_objects(self, prefix: str = "", page_size: int = 100) -> List[StoredObject]:
        """Every object under prefix, descending into folders"""
        objects: List[StoredObject] = []
        offset = 0
        while True:
            try:
                response = self.session.post(
                    f"{self.base_url}/storage/v1/object/list/{self.bucket}",
                    json={
                        "prefix": prefix,
                        "limit": page_size,
                        "offset": offset,
                        "sortBy": {"column": "name", "order": "asc"},
                    },
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise StorageError(f"List failed: {e}") from e

            if not response.ok:
                raise StorageError(f"List failed with status {response.status_code}")

            entries = response.json() or []
            for entry in entries:
                path = f"{prefix}/{entry['name']}" if prefix else entry["name"]
                # Folders come back without an id
                if entry.get("id") is None:
                    objects.extend(self.list_objects(path, page_size))
                    continue
                objects.append(StoredObject(
                    path=path,
                    created_at=parse_timestamp(entry.get("created_at")),
                    size=(entry.get("metadata") or {}).get("size"),
                ))

            if len(entries) < page_size:
                return objects
            offset += page_size

    def remove(self, paths: List[str]) -> int:
        """Delete objects; returns how many were requested"""
        if not paths:
            return 0
        try:
            response = self.session.delete(
                f"{self.base_url}/storage/v1/object/{self.bucket}",
                json={"prefixes": paths},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StorageError(f"Remove failed: {e}") from e

        if not response.ok:
            raise StorageError(f"Remove failed with status {response.status_code}")

        storage_logger.info("Removed objects", count=len(paths))
        return len(paths)


def get_storage() -> StorageClient:
    """FastAPI dependency returning a storage client for the configured bucket."""
    settings = get_settings()
    return StorageClient(settings.supabase_url, settings.supabase_service_key, settings.storage_bucket)
