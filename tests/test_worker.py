"""
Tests for scheduled post processing.
"""
from datetime import timedelta

from socialcal.models import PostAttempt, ScheduledPost
from socialcal.models.scheduled_post import utc_now
from socialcal.worker.scheduled_posts import process_due_posts, recover_stuck_posts

from fakes import USER_ID, fail


def scheduled(db, minutes=-1, **kwargs):
    kwargs.setdefault("content", "<p>Scheduled hello</p>")
    kwargs.setdefault("platforms", ["twitter", "bluesky"])
    post = ScheduledPost(user_id=USER_ID, scheduled_for=utc_now() + timedelta(minutes=minutes), **kwargs)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


class TestProcessDuePosts:
    def test_due_post_is_published(self, db, accounts, dispatcher, storage, transport):
        """Test a due post is published and its media cleaned up."""
        media = storage.public_url(f"{USER_ID}/1-a.jpg")
        post = scheduled(db, media_urls=[media])

        summary = process_due_posts(db, dispatcher, storage)

        db.refresh(post)
        assert post.status == "posted"
        assert post.posted_at is not None
        assert [r["platform"] for r in post.post_results] == ["twitter", "bluesky"]
        assert summary[0]["status"] == "posted"
        assert storage.removed == [f"{USER_ID}/1-a.jpg"]
        assert transport.payload_for("/api/post/twitter")["text"] == "Scheduled hello"

    def test_failure_records_error_message(self, db, accounts, dispatcher, storage, transport):
        """Test a failure records the platform error message."""
        transport.responses["/api/post/bluesky"] = fail("Invalid app password")
        post = scheduled(db)

        process_due_posts(db, dispatcher, storage)

        db.refresh(post)
        assert post.status == "failed"
        assert post.error_message == "bluesky: Invalid app password"
        assert storage.removed == []

    def test_future_and_non_pending_posts_are_left_alone(self, db, accounts, dispatcher, storage, transport):
        """Test future and non-pending posts are skipped."""
        future = scheduled(db, minutes=30)
        cancelled = scheduled(db, status="cancelled")

        assert process_due_posts(db, dispatcher, storage) == []

        db.refresh(future)
        db.refresh(cancelled)
        assert future.status == "pending"
        assert cancelled.status == "cancelled"
        assert transport.calls == []

    def test_batch_is_limited(self, db, accounts, dispatcher, storage):
        """Test one run processes at most one batch."""
        for i in range(12):
            scheduled(db, minutes=-(i + 1), platforms=["twitter"])

        summary = process_due_posts(db, dispatcher, storage)

        assert len(summary) == 10
        assert db.query(ScheduledPost).filter(ScheduledPost.status == "pending").count() == 2

    def test_platform_options_are_used(self, db, accounts, dispatcher, storage, transport):
        """Test stored platform options reach the dispatcher."""
        scheduled(
            db,
            platforms=["pinterest"],
            media_urls=["https://cdn.example.com/pin.jpg"],
            platform_options={"pinterest_board_id": "board-9", "pinterest_title": "Saved title"},
        )

        process_due_posts(db, dispatcher, storage)

        payload = transport.payload_for("/api/post/pinterest")
        assert payload["boardId"] == "board-9"
        assert payload["title"] == "Saved title"

    def test_unknown_platform_fails_the_post(self, db, accounts, dispatcher, storage):
        """Test an unknown stored platform fails the post."""
        post = scheduled(db, platforms=["myspace"])

        process_due_posts(db, dispatcher, storage)

        db.refresh(post)
        assert post.status == "failed"
        assert "myspace" in post.error_message

    def test_retry_does_not_post_twice(self, db, accounts, dispatcher, storage, transport):
        """Test a retry skips accounts that already got the post."""
        transport.responses["/api/post/bluesky"] = fail()
        post = scheduled(db)
        process_due_posts(db, dispatcher, storage)

        # Retry after the platform recovers
        del transport.responses["/api/post/bluesky"]
        post.status = "pending"
        db.commit()
        process_due_posts(db, dispatcher, storage)

        db.refresh(post)
        assert post.status == "posted"
        assert transport.paths().count("/api/post/twitter") == 1
        assert transport.paths().count("/api/post/bluesky") == 2
        attempts = db.query(PostAttempt).filter(PostAttempt.scheduled_post_id == post.id).all()
        assert sorted(a.status for a in attempts) == ["posted", "posted"]


class TestRecoverStuckPosts:
    def test_old_posting_rows_go_back_to_pending(self, db):
        """Test stuck posts return to pending."""
        stuck = scheduled(db, status="posting", updated_at=utc_now() - timedelta(minutes=20))
        fresh = scheduled(db, status="posting", updated_at=utc_now() - timedelta(minutes=2))

        assert recover_stuck_posts(db) == 1

        db.refresh(stuck)
        db.refresh(fresh)
        assert stuck.status == "pending"
        assert fresh.status == "posting"
