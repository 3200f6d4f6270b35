"""Admin session handling and the guard on every admin operation."""

import pytest

from hotel_cms.config import settings
from hotel_cms.models import Admin, GalleryImage, HotelCategory
from hotel_cms.security import serializer

from .fakes import ADMIN_EMAIL, ADMIN_PASSWORD, room_payload


class TestLogin:
    """POST/GET/DELETE /api/auth"""

    def test_login_sets_session(self, client):
        res = client.post("/api/auth", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})

        assert res.status_code == 200
        assert res.json()["data"]["email"] == ADMIN_EMAIL
        assert settings.SESSION_COOKIE_NAME in res.cookies
        assert client.get("/api/auth").json()["data"]["email"] == ADMIN_EMAIL

    def test_email_is_case_insensitive(self, client):
        res = client.post("/api/auth", json={"email": "  Admin@Test.Local ", "password": ADMIN_PASSWORD})
        assert res.status_code == 200

    def test_wrong_password(self, client):
        res = client.post("/api/auth", json={"email": ADMIN_EMAIL, "password": "nope"})
        assert res.status_code == 401
        assert res.json() == {"success": False, "error": "Invalid email or password"}

    def test_missing_fields(self, client):
        res = client.post("/api/auth", json={"email": ADMIN_EMAIL})
        assert res.status_code == 400

    def test_logout_clears_session(self, admin_client):
        res = admin_client.delete("/api/auth")
        assert res.status_code == 200
        assert admin_client.get("/api/auth").status_code == 401

    def test_tampered_cookie(self, client):
        client.cookies.set(settings.SESSION_COOKIE_NAME, "forged-token")
        assert client.get("/api/auth").status_code == 401

    @pytest.mark.parametrize(
        "payload",
        [
            {"aid": 1, "em": "someone@else.local"},
            {"aid": 999, "em": ADMIN_EMAIL},
            {"aid": "not-a-number", "em": ADMIN_EMAIL},
            ["aid", 1],
        ],
    )
    def test_signed_but_stale_session(self, client, payload):
        """A correctly signed cookie still has to match the stored admin row."""
        client.cookies.set(settings.SESSION_COOKIE_NAME, serializer.dumps(payload))
        assert client.get("/api/auth").status_code == 401

    def test_signed_session_for_current_admin(self, client, db):
        admin = db.query(Admin).one()
        client.cookies.set(settings.SESSION_COOKIE_NAME, serializer.dumps({"aid": admin.id, "em": admin.email}))
        assert client.get("/api/auth").status_code == 200

    def test_single_admin_row(self, client, db):
        assert db.query(Admin).count() == 1


class TestAdminGuard:
    """Every admin operation answers 401 without a session and changes nothing."""

    @pytest.mark.parametrize(
        "method,path,kwargs",
        [
            ("get", "/api/admin/rooms", {}),
            ("post", "/api/admin/rooms", {"json": room_payload()}),
            ("put", "/api/admin/rooms/1", {"json": room_payload()}),
            ("delete", "/api/admin/rooms/1", {}),
            ("get", "/api/admin/categories/1", {}),
            ("put", "/api/admin/categories/1", {"json": {"title": "X"}}),
            ("delete", "/api/admin/categories/1", {}),
            ("put", "/api/admin/categories/1/prices", {"json": {"prices": []}}),
            ("delete", "/api/admin/categories/1/prices", {}),
            ("get", "/api/admin/gallery", {}),
            ("post", "/api/admin/gallery", {"json": {"category": "Exterior", "url": "https://utfs.io/f/g", "publicId": "g"}}),
            ("put", "/api/admin/gallery/1", {"json": {"category": "Exterior"}}),
            ("delete", "/api/admin/gallery/1", {}),
            ("post", "/api/upload", {"files": {"file": ("a.png", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16, "image/png")}}),
            ("delete", "/api/upload?key=abc", {}),
        ],
    )
    def test_unauthenticated(self, client, storage, db, method, path, kwargs):
        res = getattr(client, method)(path, **kwargs)

        assert res.status_code == 401
        assert res.json() == {"success": False, "error": "Unauthorized"}
        assert db.query(HotelCategory).count() == 0
        assert db.query(GalleryImage).count() == 0
        assert storage.uploads == []
        assert storage.delete_calls == []

    def test_existing_data_untouched(self, admin_client, storage, db):
        cid = admin_client.post("/api/admin/rooms", json=room_payload()).json()["data"]["id"]
        admin_client.delete("/api/auth")

        assert admin_client.delete(f"/api/admin/rooms/{cid}").status_code == 401
        assert admin_client.put(f"/api/admin/rooms/{cid}", json=room_payload(keys=())).status_code == 401
        assert db.query(HotelCategory).count() == 1
        assert db.query(GalleryImage).count() == 2
        assert storage.delete_calls == []
