"""
Tests for media upload and cleanup routes.
"""
from fakes import STORAGE_URL, USER_ID


def image(name="photo.jpg", data=b"jpeg-bytes", content_type="image/jpeg"):
    return ("files", (name, data, content_type))


class TestUpload:
    def test_upload_stores_under_user_folder(self, client, auth_headers, storage):
        """Test uploads are stored under the user's folder."""
        response = client.post("/api/upload", headers=auth_headers, files=[image(), image("clip.mp4", b"v", "video/mp4")])

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [f["name"] for f in data["files"]] == ["photo.jpg", "clip.mp4"]
        for f in data["files"]:
            assert f["path"].startswith(f"{USER_ID}/")
            assert f["url"] == f"{STORAGE_URL}/storage/v1/object/public/post-media/{f['path']}"
        assert len(storage.objects) == 2

    def test_unsupported_files_are_skipped(self, client, auth_headers, storage):
        """Test unsupported files are skipped."""
        response = client.post("/api/upload", headers=auth_headers, files=[
            image(),
            image("notes.txt", b"text", "text/plain"),
        ])

        assert response.status_code == 200
        assert [f["name"] for f in response.json()["files"]] == ["photo.jpg"]

    def test_only_unsupported_files_is_an_error(self, client, auth_headers):
        """Test an upload of only unsupported files fails."""
        response = client.post("/api/upload", headers=auth_headers, files=[image("notes.txt", b"text", "text/plain")])

        assert response.status_code == 400
        assert response.json()["error"] == "Failed to upload files"

    def test_storage_failure_skips_that_file(self, client, auth_headers, storage):
        """Test a storage failure skips only that file."""
        storage.fail_data.add(b"broken")

        response = client.post("/api/upload", headers=auth_headers, files=[image(), image("b.jpg", b"broken")])

        assert response.status_code == 200
        assert [f["name"] for f in response.json()["files"]] == ["photo.jpg"]

    def test_requires_auth(self, client):
        """Test uploading requires authentication."""
        response = client.post("/api/upload", files=[image()])
        assert response.status_code == 401


class TestCleanup:
    def test_removes_only_own_objects(self, client, auth_headers, storage):
        """Test cleanup only removes the caller's objects."""
        own = storage.public_url(f"{USER_ID}/1-a.jpg")
        other = storage.public_url("someone-else/1-b.jpg")

        response = client.post("/api/upload/cleanup", headers=auth_headers, json={
            "urls": [own, other, "https://cdn.example.com/c.jpg"],
        })

        assert response.status_code == 200
        assert response.json() == {"success": True, "removed": 1}
        assert storage.removed == [f"{USER_ID}/1-a.jpg"]

    def test_storage_failure_is_a_server_error(self, client, auth_headers, storage):
        """Test a cleanup storage failure answers 500."""
        storage.fail_remove = True

        response = client.post("/api/upload/cleanup", headers=auth_headers, json={
            "urls": [storage.public_url(f"{USER_ID}/1-a.jpg")],
        })

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to clean up media"
