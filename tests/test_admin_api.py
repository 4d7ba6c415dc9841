"""
API tests for the admin panel: site settings, users, stats.
"""

import pytest

from app.models.event import Event
from app.models.journal import Journal

from tests.conftest import DEFAULT_PASSWORD


def user_id_of(client):
    return client.get("/api/me").json()["user_id"]


@pytest.fixture
def user_client(admin_client, register):
    return register("Ben", "b@x.com")


class TestAdminGate:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/admin/site-settings"),
            ("get", "/api/admin/usuarios"),
            ("get", "/api/admin/stats"),
        ],
    )
    def test_non_admin_is_forbidden(self, user_client, method, path):
        assert getattr(user_client, method)(path).status_code == 403

    def test_anonymous_is_unauthenticated(self, make_client):
        assert make_client().get("/api/admin/stats").status_code == 401


class TestSiteSettings:
    def test_defaults(self, admin_client):
        response = admin_client.get("/api/admin/site-settings")
        assert response.status_code == 200
        assert response.json() == {"site_name": "Baby Journal", "allow_new_registrations": True}

    def test_update(self, admin_client, make_client):
        response = admin_client.put(
            "/api/admin/site-settings",
            json={"site_name": "Lucía's diary", "allow_new_registrations": False},
        )

        assert response.status_code == 200
        assert make_client().get("/api/site-info").json() == {
            "site_name": "Lucía's diary",
            "allow_new_registrations": False,
        }

    @pytest.mark.parametrize(
        "payload",
        [
            {"site_name": "", "allow_new_registrations": True},
            {"site_name": "x" * 256, "allow_new_registrations": True},
            {"site_name": "Site", "allow_new_registrations": "maybe"},
        ],
    )
    def test_invalid_update(self, admin_client, payload):
        assert admin_client.put("/api/admin/site-settings", json=payload).status_code == 400

    def test_closed_registration_rejects_even_valid_input(self, admin_client, make_client):
        admin_client.put(
            "/api/admin/site-settings",
            json={"site_name": "Baby Journal", "allow_new_registrations": False},
        )

        client = make_client()
        valid = client.post(
            "/api/registro",
            json={"name": "Carl", "email": "c@x.com", "password": DEFAULT_PASSWORD},
        )
        invalid = client.post("/api/registro", json={"email": "broken"})

        assert valid.status_code == 403
        assert invalid.status_code == 403

    def test_closed_registration_rejects_malformed_json(self, admin_client, make_client):
        admin_client.put(
            "/api/admin/site-settings",
            json={"site_name": "Baby Journal", "allow_new_registrations": False},
        )

        response = make_client().post(
            "/api/registro",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 403


class TestUserManagement:
    def test_list_users(self, admin_client, user_client):
        users = admin_client.get("/api/admin/usuarios").json()

        assert [(u["email"], u["role"]) for u in users] == [("admin@x.com", "admin"), ("b@x.com", "user")]
        assert all("password_hash" not in u for u in users)

    def test_promote_user_ends_their_sessions(self, admin_client, user_client, make_client):
        target = user_id_of(user_client)

        response = admin_client.put(f"/api/admin/usuarios/{target}/rol", json={"role": "admin"})

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert user_client.get("/api/me").status_code == 401

        relogged = make_client()
        relogged.post("/api/login", json={"email": "b@x.com", "password": DEFAULT_PASSWORD})
        assert relogged.get("/api/admin/stats").status_code == 200

    def test_unchanged_role_keeps_sessions(self, admin_client):
        me = user_id_of(admin_client)

        response = admin_client.put(f"/api/admin/usuarios/{me}/rol", json={"role": "admin"})

        assert response.status_code == 200
        assert admin_client.get("/api/me").status_code == 200

    def test_admin_cannot_demote_self(self, admin_client):
        me = user_id_of(admin_client)
        response = admin_client.put(f"/api/admin/usuarios/{me}/rol", json={"role": "user"})
        assert response.status_code == 403

    def test_role_change_unknown_user(self, admin_client):
        assert admin_client.put("/api/admin/usuarios/9999/rol", json={"role": "admin"}).status_code == 404

    def test_admin_cannot_delete_self(self, admin_client):
        me = user_id_of(admin_client)
        assert admin_client.delete(f"/api/admin/usuarios/{me}").status_code == 403

    def test_delete_unknown_user(self, admin_client):
        assert admin_client.delete("/api/admin/usuarios/9999").status_code == 404

    def test_deleted_author_events_remain_without_author(self, admin_client, user_client, db):
        journal_id = admin_client.get("/api/me").json()["active_journal_id"]
        admin_client.post(f"/api/diarios/{journal_id}/acceso", json={"email": "b@x.com", "role": "editor"})
        created = user_client.post(
            f"/api/eventos/{journal_id}", data={"kind": "text", "date": "2024-01-01", "description": "hi"}
        ).json()

        response = admin_client.delete(f"/api/admin/usuarios/{user_id_of(user_client)}")

        assert response.status_code == 200
        event = admin_client.get(f"/api/eventos/{journal_id}/{created['id']}").json()
        assert event["author_id"] is None
        assert event["author_name"] is None
        assert db.query(Event).count() == 1
        assert user_client.get("/api/me").status_code == 401

    def test_sole_owner_journal_passes_to_oldest_editor(self, admin_client, register):
        ana = register("Ana", "a@x.com")
        viewer = register("Vic", "v@x.com")
        editor = register("Ed", "e@x.com")
        journal_id = ana.get("/api/me").json()["active_journal_id"]
        ana.post(f"/api/diarios/{journal_id}/acceso", json={"email": "v@x.com", "role": "viewer"})
        ana.post(f"/api/diarios/{journal_id}/acceso", json={"email": "e@x.com", "role": "editor"})

        admin_client.delete(f"/api/admin/usuarios/{user_id_of(ana)}")

        assert editor.get(f"/api/diarios/{journal_id}").json()["role"] == "owner"
        assert viewer.get(f"/api/diarios/{journal_id}").json()["role"] == "viewer"

    def test_sole_owner_journal_passes_to_viewer_without_editors(self, admin_client, register):
        ana = register("Ana", "a@x.com")
        viewer = register("Vic", "v@x.com")
        journal_id = ana.get("/api/me").json()["active_journal_id"]
        ana.post(f"/api/diarios/{journal_id}/acceso", json={"email": "v@x.com", "role": "viewer"})

        admin_client.delete(f"/api/admin/usuarios/{user_id_of(ana)}")

        assert viewer.get(f"/api/diarios/{journal_id}").json()["role"] == "owner"

    def test_unshared_journal_is_deleted_with_its_media(self, admin_client, register, db, media_root):
        ana = register("Ana", "a@x.com")
        journal_id = ana.get("/api/me").json()["active_journal_id"]
        ana.post(
            f"/api/eventos/{journal_id}",
            data={"kind": "photo", "date": "2024-01-01"},
            files={"media": ("a.png", b"\x89PNG", "image/png")},
        )
        journal_dir = media_root / "diarios" / str(journal_id)
        assert journal_dir.exists()

        admin_client.delete(f"/api/admin/usuarios/{user_id_of(ana)}")

        assert db.query(Journal).filter(Journal.id == journal_id).first() is None
        assert db.query(Event).filter(Event.journal_id == journal_id).count() == 0
        assert not journal_dir.exists()

    def test_co_owned_journal_is_untouched(self, admin_client, register):
        ana = register("Ana", "a@x.com")
        ben = register("Ben", "b@x.com")
        journal_id = ana.get("/api/me").json()["active_journal_id"]
        ana.post(f"/api/diarios/{journal_id}/acceso", json={"email": "b@x.com", "role": "owner"})

        admin_client.delete(f"/api/admin/usuarios/{user_id_of(ana)}")

        grants = ben.get(f"/api/diarios/{journal_id}/acceso").json()["grants"]
        assert [(g["email"], g["role"]) for g in grants] == [("b@x.com", "owner")]


class TestStats:
    def test_counts(self, admin_client, register):
        ana = register("Ana", "a@x.com")
        journal_id = ana.get("/api/me").json()["active_journal_id"]
        ana.post("/api/diarios", json={"subject_name": "Second"})
        ana.post(f"/api/eventos/{journal_id}", data={"kind": "text", "date": "2024-01-01"})

        stats = admin_client.get("/api/admin/stats").json()

        assert stats == {"total_users": 2, "total_journals": 3, "total_events": 1}


class TestScenario:
    def test_end_to_end(self, make_client):
        a = make_client()
        registered = a.post(
            "/api/registro",
            json={"name": "Ana", "email": "a@x.com", "password": "password1"},
        )
        assert registered.status_code == 201
        default_journal = registered.json()["user"]["active_journal_id"]
        assert a.get(f"/api/diarios/{default_journal}").json()["role"] == "owner"

        wrong = make_client().post("/api/login", json={"email": "a@x.com", "password": "wrong-password"})
        assert wrong.status_code == 401

        j2 = a.post("/api/diarios", json={"subject_name": "J2"})
        assert j2.status_code == 201
        assert j2.json()["role"] == "owner"

        b = make_client()
        assert b.post(
            "/api/registro",
            json={"name": "Ben", "email": "b@x.com", "password": "password1"},
        ).status_code == 201
        assert b.get(f"/api/eventos/{j2.json()['id']}").status_code == 403

        closed = a.put(
            "/api/admin/site-settings",
            json={"site_name": "Baby Journal", "allow_new_registrations": False},
        )
        assert closed.status_code == 200

        late = make_client().post(
            "/api/registro",
            json={"name": "Carl", "email": "c@x.com", "password": "password1"},
        )
        assert late.status_code == 403
