"""
Tests for draft routes.
"""
from socialcal.models import Draft

from fakes import make_token


class TestDrafts:
    def test_create_draft(self, client, auth_headers):
        """Test creating a draft."""
        response = client.post("/api/drafts", headers=auth_headers, json={
            "title": "Launch",
            "content": "<p>Big news</p>",
            "platforms": ["twitter", "linkedin"],
            "platformContent": {"twitter": "Short news"},
        })
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Launch"
        assert data["platforms"] == ["twitter", "linkedin"]
        assert data["platform_content"] == {"twitter": "Short news"}

    def test_blank_title_gets_a_dated_default(self, client, auth_headers):
        """Test a blank title is replaced by a dated default."""
        response = client.post("/api/drafts", headers=auth_headers, json={"title": "  ", "content": "x"})
        assert response.status_code == 201
        assert response.json()["title"].startswith("Draft - ")

    def test_list_only_returns_own_drafts(self, client, auth_headers, db):
        """Test users only see their own drafts."""
        db.add(Draft(user_id="someone-else", title="Theirs", content="x"))
        db.commit()
        client.post("/api/drafts", headers=auth_headers, json={"title": "Mine", "content": "x"})

        response = client.get("/api/drafts", headers=auth_headers)
        assert response.status_code == 200
        assert [d["title"] for d in response.json()] == ["Mine"]

    def test_update_draft(self, client, auth_headers):
        """Test updating a draft by id in the body."""
        created = client.post("/api/drafts", headers=auth_headers, json={"title": "Old", "content": "x"}).json()

        response = client.patch("/api/drafts", headers=auth_headers, json={
            "draftId": created["id"],
            "content": "updated",
            "mediaUrls": ["https://cdn.example.com/a.jpg"],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Old"
        assert data["content"] == "updated"
        assert data["media_urls"] == ["https://cdn.example.com/a.jpg"]

    def test_update_requires_draft_id(self, client, auth_headers):
        """Test updating without a draft id is rejected."""
        response = client.patch("/api/drafts", headers=auth_headers, json={"content": "x"})
        assert response.status_code == 422

    def test_delete_draft(self, client, auth_headers, db):
        """Test deleting a draft."""
        created = client.post("/api/drafts", headers=auth_headers, json={"content": "x"}).json()

        response = client.delete(f"/api/drafts?id={created['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert db.query(Draft).count() == 0

    def test_cannot_touch_another_users_draft(self, client, db):
        """Test another user's draft cannot be deleted."""
        draft = Draft(user_id="user-1", title="Mine", content="x")
        db.add(draft)
        db.commit()
        other = {"Authorization": f"Bearer {make_token('intruder')}"}

        response = client.delete(f"/api/drafts?id={draft.id}", headers=other)
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"
        assert db.query(Draft).count() == 1

    def test_requires_auth(self, client):
        """Test drafts require authentication."""
        response = client.get("/api/drafts")
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized"

    def test_rejects_bad_token(self, client):
        """Test a malformed token is rejected."""
        response = client.get("/api/drafts", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401

    def test_rejects_wrong_audience(self, client):
        """Test a token for another audience is rejected."""
        token = make_token(aud="anon")
        response = client.get("/api/drafts", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
