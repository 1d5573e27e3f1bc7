"""
Test doubles for storage and platform routes, and token helpers.
"""
import time
from datetime import datetime, timedelta, timezone

from jose import jwt

from socialcal.config import get_settings
from socialcal.models.scheduled_post import utc_now
from socialcal.posting.errors import PlatformPostError
from socialcal.posting.transport import PlatformTransport
from socialcal.services.storage import StorageClient, StorageError, StoredObject

USER_ID = "user-1"
STORAGE_URL = "https://abc.supabase.co"


class FakeStorage(StorageClient):
    """In-memory bucket; uploads whose bytes are in `fail_data` are refused"""

    def __init__(self):
        super().__init__(STORAGE_URL, "service-key", "post-media")
        self.objects = {}
        self.created = {}
        self.removed = []
        self.fail_data = set()
        self.fail_remove = False
        self.fail_list = False

    def add_object(self, path, created_at=None, data=b"stored"):
        self.objects[path] = (data, "image/jpeg")
        self.created[path] = created_at or utc_now()
        return self.public_url(path)

    def upload(self, path, data, content_type):
        if data in self.fail_data:
            raise StorageError("Upload failed with status 500")
        self.objects[path] = (data, content_type)
        self.created[path] = utc_now()
        return self.public_url(path)

    def list_objects(self, prefix="", page_size=100):
        if self.fail_list:
            raise StorageError("List failed with status 500")
        return [
            StoredObject(path, self.created.get(path), len(data))
            for path, (data, _) in sorted(self.objects.items())
            if path.startswith(prefix)
        ]

    def remove(self, paths):
        if self.fail_remove:
            raise StorageError("Remove failed with status 500")
        self.removed.extend(paths)
        for path in paths:
            self.objects.pop(path, None)
        return len(paths)


class FakeTransport(PlatformTransport):
    """
    Records every platform call.

    `responses` maps a route path to a dict (returned), an exception
    (raised) or a function of the payload returning either; unknown paths
    answer {"id": "<platform>-<n>"}.
    """

    def __init__(self):
        super().__init__("http://platforms.test")
        self.calls = []
        self.responses = {}
        self.delay = 0

    def _answer(self, path, payload):
        if self.delay:
            time.sleep(self.delay)
        response = self.responses.get(path)
        if callable(response):
            response = response(payload)
        if isinstance(response, Exception):
            raise response
        if response is not None:
            return response
        return {"id": f"{path.rsplit('/', 1)[-1]}-{len(self.calls)}"}

    def post_json(self, path, payload, failure_message, timeout=None):
        self.calls.append((path, payload))
        return self._answer(path, payload)

    def post_multipart(self, path, fields, files, failure_message, timeout=None):
        self.calls.append((path, {"fields": fields, "files": [f[1][0] for f in files]}))
        return self._answer(path, fields)

    def paths(self):
        return [path for path, _ in self.calls]

    def payload_for(self, path):
        return next(payload for p, payload in self.calls if p == path)


def make_token(user_id: str = USER_ID, **claims) -> str:
    settings = get_settings()
    payload = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "email": "test@example.com",
    }
    payload.update(claims)
    return jwt.encode(payload, settings.supabase_jwt_secret, algorithm=settings.jwt_algorithm)


def fail(message="Platform is down"):
    return PlatformPostError(message, 500)

