"""
Tests for the publish routes.
"""
import json
from datetime import timedelta

from socialcal.models import ScheduledPost
from socialcal.models.scheduled_post import utc_now
from socialcal.posting.platforms import Platform
from socialcal.posting.reconcile import Reconciler
from socialcal.posting.types import PostData
from socialcal.schemas.publish import ComposerPayload

from fakes import USER_ID, fail


def submit(client, headers, path="/api/publish", files=None, **payload):
    return client.post(path, headers=headers, data={"payload": json.dumps(payload)}, files=files)


class TestPublishNow:
    def test_publish_to_several_platforms(self, client, auth_headers, accounts, transport):
        """Test publishing to several platforms."""
        response = submit(client, auth_headers, platforms=["twitter", "bluesky"], content="<p>Hello</p>")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["blocked"] is False
        assert [r["success"] for r in data["results"]] == [True, True]
        assert {p["platform"]: p["state"] for p in data["progress"]} == {"twitter": "success", "bluesky": "success"}
        assert transport.payload_for("/api/post/twitter")["text"] == "Hello"

    def test_blocked_submission_is_not_an_http_error(self, client, auth_headers, accounts, transport):
        """Test a blocked submission answers 200 with the reason."""
        response = submit(client, auth_headers, platforms=["instagram"], content="Hi")

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is False
        assert data["blocked"] is True
        assert data["message"] == "Instagram requires an image or video"
        assert transport.calls == []

    def test_partial_failure(self, client, auth_headers, accounts, transport):
        """Test a partial failure is not ok."""
        transport.responses["/api/post/bluesky"] = fail("Invalid app password")

        data = submit(client, auth_headers, platforms=["twitter", "bluesky"], content="Hi").json()

        assert data["ok"] is False
        assert data["results"][1]["error"] == "Invalid app password"

    def test_files_are_uploaded_then_cleaned_up(self, client, auth_headers, accounts, storage, transport):
        """Test attached files are uploaded and removed after success."""
        response = submit(
            client, auth_headers,
            files=[("files", ("photo.jpg", b"jpeg", "image/jpeg"))],
            platforms=["twitter"], content="With photo",
        )

        data = response.json()
        assert data["ok"] is True
        assert len(data["media_urls"]) == 1
        assert transport.payload_for("/api/post/twitter")["mediaUrls"] == data["media_urls"]
        assert storage.objects == {}
        assert storage.removed[0].startswith(f"{USER_ID}/")

    def test_threads_thread_mode(self, client, auth_headers, accounts, transport):
        """Test publishing a Threads thread."""
        data = submit(
            client, auth_headers,
            platforms=["threads"], content="ignored",
            threadsMode="thread", threadPosts=["First", "Second"],
        ).json()

        assert data["ok"] is True
        payload = transport.payload_for("/api/post/threads/thread-numbered")
        assert len(payload["posts"]) == 2
        assert payload["addNumbers"] is False

    def test_invalid_payload(self, client, auth_headers):
        """Test malformed composer payloads are rejected."""
        response = submit(client, auth_headers, platforms=["myspace"], content="Hi")
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid composer payload"

        response = client.post("/api/publish", headers=auth_headers, data={"payload": "{not json"})
        assert response.status_code == 422

    def test_requires_auth(self, client):
        """Test publishing requires authentication."""
        response = client.post("/api/publish", data={"payload": "{}"})
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"


class TestPublishLater:
    def test_schedule_from_composer(self, client, auth_headers, db):
        """Test scheduling from the composer stores a pending post."""
        when = (utc_now() + timedelta(hours=2)).isoformat()

        data = submit(
            client, auth_headers, path="/api/publish/schedule",
            platforms=["pinterest"], content="Pin later",
            mediaUrls=["https://cdn.example.com/pin.jpg"],
            pinterestBoardId="board-1",
            scheduledFor=when,
        ).json()

        assert data["ok"] is True
        post = db.get(ScheduledPost, data["scheduled_post_id"])
        assert post.status == "pending"
        assert post.platform_options["pinterest_board_id"] == "board-1"
        assert post.media_urls == ["https://cdn.example.com/pin.jpg"]

    def test_schedule_needs_a_time(self, client, auth_headers, db):
        """Test scheduling without a time is blocked."""
        data = submit(client, auth_headers, path="/api/publish/schedule", platforms=["twitter"], content="x").json()

        assert data["ok"] is False
        assert data["blocked"] is True
        assert data["message"] == "Please choose when to publish this post"
        assert db.query(ScheduledPost).count() == 0

    def test_schedule_in_the_past(self, client, auth_headers):
        """Test scheduling in the past is blocked."""
        when = (utc_now() - timedelta(minutes=1)).isoformat()
        data = submit(client, auth_headers, path="/api/publish/schedule",
                      platforms=["twitter"], content="x", scheduledFor=when).json()

        assert data["message"] == "Scheduled time must be in the future"

    def test_schedule_failure_is_not_ok(self, client, auth_headers, monkeypatch):
        """Test a persistence failure comes back as a failed outcome, not a server error."""
        def broken(*args, **kwargs):
            raise RuntimeError("db down")

        monkeypatch.setattr(Reconciler, "create_scheduled_post", broken)
        when = (utc_now() + timedelta(hours=1)).isoformat()

        response = submit(client, auth_headers, path="/api/publish/schedule",
                          platforms=["twitter"], content="x", scheduledFor=when)

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is False
        assert data["blocked"] is False
        assert data["message"] == "Failed to schedule post: db down"
        assert data["notices"][-1]["title"] == "Failed to schedule post"


class TestPlatformKeys:
    def test_composer_payload_drops_unknown_platform_keys(self):
        """Test composer overrides and account picks keep only known platforms."""
        payload = ComposerPayload(
            platforms=["twitter"],
            platformContent={"twitter": "short", "myspace": "ignored"},
            selectedAccounts={"twitter": ["tw-2"], "friendster": ["x"]},
        )
        state = payload.to_state()
        assert state.platform_content == {Platform.TWITTER: "short"}
        assert state.selected_accounts == {Platform.TWITTER: ["tw-2"]}

    def test_stored_record_uses_the_same_keys(self):
        """Test a stored post rebuilds the same platform keys as the composer."""
        data = PostData.from_record(
            "hello", [Platform.TWITTER], [],
            platform_content={"twitter": "short", "myspace": "ignored"},
            options={"selected_accounts": {"twitter": ["tw-2"], "friendster": ["x"]}},
        )
        assert data.platform_content == {Platform.TWITTER: "short"}
        assert data.selected_accounts == {Platform.TWITTER: ["tw-2"]}
