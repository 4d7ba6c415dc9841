"""
API tests for journal events and media uploads.
"""

import pytest

from app.core.config import settings


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def owner(register):
    return register("Ana", "a@x.com")


@pytest.fixture
def journal_id(owner, active_journal_id):
    return active_journal_id(owner)


@pytest.fixture
def member(owner, journal_id, register):
    """Register another user and give them a role on the owner's journal."""

    def _member(name: str, email: str, role: str):
        client = register(name, email)
        response = owner.post(f"/api/diarios/{journal_id}/acceso", json={"email": email, "role": role})
        assert response.status_code == 200, response.text
        return client

    return _member


@pytest.fixture
def create_event(journal_id):
    def _create_event(client, kind="text", date="2024-01-15", description="First smile", files=None):
        data = {"kind": kind, "date": date}
        if description is not None:
            data["description"] = description
        return client.post(f"/api/eventos/{journal_id}", data=data, files=files)

    return _create_event


class TestCreateEvent:
    def test_create_text_event(self, owner, journal_id, create_event):
        response = create_event(owner)

        assert response.status_code == 201
        event = response.json()
        assert event["kind"] == "text"
        assert event["date"] == "2024-01-15"
        assert event["description"] == "First smile"
        assert event["journal_id"] == journal_id
        assert event["author_name"] == "Ana"
        assert event["media_path"] is None
        assert event["is_favorite"] is False

    def test_create_event_with_media(self, owner, journal_id, create_event, media_root):
        response = create_event(owner, kind="photo", files={"media": ("smile.PNG", PNG_BYTES, "image/png")})

        assert response.status_code == 201
        media_path = response.json()["media_path"]
        assert media_path.startswith(f"/media/diarios/{journal_id}/media-")
        assert media_path.endswith(".png")

        stored = media_root / media_path[len("/media/"):]
        assert stored.read_bytes() == PNG_BYTES

    def test_disallowed_media_type(self, owner, journal_id, create_event, media_root):
        response = create_event(owner, files={"media": ("notes.txt", b"hello", "text/plain")})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("media")
        journal_dir = media_root / "diarios" / str(journal_id)
        assert not journal_dir.exists() or not any(journal_dir.iterdir())
        assert owner.get(f"/api/eventos/{journal_id}").json()["events"] == []

    def test_media_too_large(self, owner, journal_id, create_event, media_root, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 16)

        response = create_event(owner, files={"media": ("big.png", PNG_BYTES, "image/png")})

        assert response.status_code == 413
        journal_dir = media_root / "diarios" / str(journal_id)
        assert not any(journal_dir.iterdir())
        assert owner.get(f"/api/eventos/{journal_id}").json()["events"] == []

    def test_missing_kind(self, owner, journal_id):
        response = owner.post(f"/api/eventos/{journal_id}", data={"date": "2024-01-15"})
        assert response.status_code == 400
        assert response.json()["detail"].startswith("kind")

    def test_invalid_date(self, owner, create_event):
        response = create_event(owner, date="15/01/2024")
        assert response.status_code == 400
        assert response.json()["detail"].startswith("date")

    def test_description_too_long(self, owner, create_event):
        response = create_event(owner, description="x" * 501)
        assert response.status_code == 400
        assert response.json()["detail"].startswith("description")


class TestReadEvents:
    def test_events_ordered_by_date_then_id(self, owner, journal_id, create_event):
        first = create_event(owner, date="2024-01-10").json()
        second = create_event(owner, date="2024-02-01").json()
        third = create_event(owner, date="2024-01-10").json()

        events = owner.get(f"/api/eventos/{journal_id}").json()["events"]

        assert [e["id"] for e in events] == [second["id"], third["id"], first["id"]]

    def test_get_single_event(self, owner, journal_id, create_event):
        created = create_event(owner).json()
        response = owner.get(f"/api/eventos/{journal_id}/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_event_from_another_journal_is_404(self, owner, journal_id, create_event):
        created = create_event(owner).json()
        other = owner.post("/api/diarios", json={"subject_name": "Other"}).json()

        assert owner.get(f"/api/eventos/{other['id']}/{created['id']}").status_code == 404

    def test_viewer_reads_but_cannot_write(self, owner, journal_id, member, create_event):
        created = create_event(owner).json()
        viewer = member("Ben", "b@x.com", "viewer")

        assert viewer.get(f"/api/eventos/{journal_id}").status_code == 200
        assert create_event(viewer).status_code == 403
        assert viewer.patch(f"/api/eventos/{journal_id}/{created['id']}/favorito").status_code == 403
        assert viewer.delete(f"/api/eventos/{journal_id}/{created['id']}").status_code == 403

    def test_no_grant_is_forbidden_not_empty(self, journal_id, register):
        stranger = register("Eve", "e@x.com")
        response = stranger.get(f"/api/eventos/{journal_id}")
        assert response.status_code == 403

    def test_unauthenticated(self, make_client, journal_id):
        assert make_client().get(f"/api/eventos/{journal_id}").status_code == 401


class TestUpdateEvents:
    def test_editor_creates_and_updates(self, journal_id, member, create_event):
        editor = member("Ben", "b@x.com", "editor")
        created = create_event(editor)
        assert created.status_code == 201
        assert created.json()["author_name"] == "Ben"

        response = editor.put(
            f"/api/eventos/{journal_id}/{created.json()['id']}",
            json={"kind": "milestone", "description": "First steps", "date": "2024-03-01"},
        )

        assert response.status_code == 200
        assert response.json()["kind"] == "milestone"
        assert response.json()["description"] == "First steps"
        assert response.json()["date"] == "2024-03-01"

    def test_update_missing_event_is_404(self, owner, journal_id):
        response = owner.put(
            f"/api/eventos/{journal_id}/9999",
            json={"kind": "text", "description": "x", "date": "2024-03-01"},
        )
        assert response.status_code == 404

    def test_toggle_favorite_and_filter(self, owner, journal_id, create_event):
        keep = create_event(owner).json()
        create_event(owner)

        toggled = owner.patch(f"/api/eventos/{journal_id}/{keep['id']}/favorito")
        assert toggled.json()["is_favorite"] is True

        favorites = owner.get(f"/api/eventos/{journal_id}", params={"favorites_only": True}).json()["events"]
        assert [e["id"] for e in favorites] == [keep["id"]]

        untoggled = owner.patch(f"/api/eventos/{journal_id}/{keep['id']}/favorito")
        assert untoggled.json()["is_favorite"] is False


class TestDeleteEvents:
    def test_delete_removes_row_and_media(self, owner, journal_id, create_event, media_root):
        created = create_event(owner, kind="photo", files={"media": ("a.gif", b"GIF89a", "image/gif")}).json()
        stored = media_root / created["media_path"][len("/media/"):]
        assert stored.exists()

        response = owner.delete(f"/api/eventos/{journal_id}/{created['id']}")

        assert response.status_code == 200
        assert not stored.exists()
        assert owner.get(f"/api/eventos/{journal_id}/{created['id']}").status_code == 404

    def test_delete_succeeds_when_media_already_gone(self, owner, journal_id, create_event, media_root):
        created = create_event(owner, kind="photo", files={"media": ("a.gif", b"GIF89a", "image/gif")}).json()
        (media_root / created["media_path"][len("/media/"):]).unlink()

        response = owner.delete(f"/api/eventos/{journal_id}/{created['id']}")

        assert response.status_code == 200

    def test_delete_succeeds_when_media_removal_fails(self, owner, journal_id, create_event, media_root, monkeypatch):
        created = create_event(owner, kind="photo", files={"media": ("a.gif", b"GIF89a", "image/gif")}).json()
        stored = media_root / created["media_path"][len("/media/"):]

        def fail_remove(path):
            raise OSError("permission denied")

        with monkeypatch.context() as patched:
            patched.setattr("app.services.media.os.remove", fail_remove)
            response = owner.delete(f"/api/eventos/{journal_id}/{created['id']}")

        assert response.status_code == 200
        assert owner.get(f"/api/eventos/{journal_id}/{created['id']}").status_code == 404
        assert stored.exists()
