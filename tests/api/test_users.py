"""End-to-end tests for /api/user."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

URL = "/api/user"
TEST_PASSWORD = "Passw0rd!"
NEW_PASSWORD = "N3w-Passw0rd!"
LONG_PASSWORD = "Aa1!" + "x" * 80


def _bearer(client: TestClient, email: str, password: str = TEST_PASSWORD) -> dict[str, str]:
    resp = client.post(f"{URL}/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


class TestLogin:
    def test_token_authenticates(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        make_user("dina", "KOL_MANAGER")
        headers = _bearer(client, "dina@example.com")
        assert client.get("/api/kol", headers=headers).status_code == 200

    def test_message(self, client: TestClient, make_user: Callable[..., dict[str, Any]]) -> None:
        make_user("dina", "BRAND")
        resp = client.post(
            f"{URL}/login", json={"email": "dina@example.com", "password": TEST_PASSWORD}
        )
        assert resp.json()["message"] == "Login successfully."

    def test_wrong_password(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        make_user("dina", "BRAND")
        resp = client.post(f"{URL}/login", json={"email": "dina@example.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "wrong password"

    def test_missing_fields(self, client: TestClient) -> None:
        resp = client.post(f"{URL}/login", json={"email": "dina@example.com"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email and password is required."


class TestCreate:
    def test_admin_creates_user(self, client: TestClient, admin: dict[str, str]) -> None:
        resp = client.post(
            URL,
            json={
                "username": "eko",
                "email": "eko@example.com",
                "password": TEST_PASSWORD,
                "role": "BRAND",
            },
            headers=admin,
        )
        body = resp.json()

        assert resp.status_code == 201
        assert body["message"] == "User eko created successfully."
        assert "password" not in body["data"]
        assert body["data"]["role"] == "BRAND"

    def test_weak_password(self, client: TestClient, admin: dict[str, str]) -> None:
        resp = client.post(
            URL,
            json={
                "username": "eko",
                "email": "eko@example.com",
                "password": "weak",
                "role": "BRAND",
            },
            headers=admin,
        )
        assert resp.status_code == 400
        assert resp.json()["message"].startswith("Password must be at least 8 characters")

    def test_password_longer_than_72_bytes(
        self, client: TestClient, services: dict[str, Any], admin: dict[str, str]
    ) -> None:
        resp = client.post(
            URL,
            json={
                "username": "eko",
                "email": "eko@example.com",
                "password": LONG_PASSWORD,
                "role": "BRAND",
            },
            headers=admin,
        )
        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "message": "Password must be at most 72 bytes long.",
        }
        assert services["gateway"].count("users") == 1

    def test_missing_role(self, client: TestClient, admin: dict[str, str]) -> None:
        resp = client.post(
            URL,
            json={"username": "eko", "email": "eko@example.com", "password": TEST_PASSWORD},
            headers=admin,
        )
        assert resp.json()["message"] == "All fields must be filled, including role"

    def test_invalid_role(self, client: TestClient, admin: dict[str, str]) -> None:
        resp = client.post(
            URL,
            json={
                "username": "eko",
                "email": "eko@example.com",
                "password": TEST_PASSWORD,
                "role": "OWNER",
            },
            headers=admin,
        )
        assert resp.json()["message"] == "Invalid role"

    def test_duplicate_email(
        self,
        client: TestClient,
        admin: dict[str, str],
        make_user: Callable[..., dict[str, Any]],
    ) -> None:
        make_user("eko", "BRAND")
        resp = client.post(
            URL,
            json={
                "username": "someone-else",
                "email": "eko@example.com",
                "password": TEST_PASSWORD,
                "role": "BRAND",
            },
            headers=admin,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email or username is already registered."


class TestList:
    def test_sorted_without_passwords(
        self,
        client: TestClient,
        admin: dict[str, str],
        make_user: Callable[..., dict[str, Any]],
    ) -> None:
        make_user("zara", "BRAND")
        make_user("budi", "BRAND")

        resp = client.get(URL, params={"sortBy": "username", "order": "desc"}, headers=admin)
        body = resp.json()

        assert [u["username"] for u in body["data"]] == ["zara", "budi", "admin"]
        assert all("password" not in u for u in body["data"])
        assert body["pagination"]["total"] == 3

    def test_unknown_sort_falls_back(self, client: TestClient, admin: dict[str, str]) -> None:
        resp = client.get(URL, params={"sortBy": "password", "order": "sideways"}, headers=admin)
        assert resp.status_code == 200
        assert resp.json()["data"][0]["username"] == "admin"

    def test_limit_is_at_least_one(self, client: TestClient, admin: dict[str, str]) -> None:
        body = client.get(URL, params={"limit": 0}, headers=admin).json()
        assert body["pagination"]["limit"] == 1


class TestUpdate:
    @pytest.fixture
    def other(self, make_user: Callable[..., dict[str, Any]]) -> dict[str, Any]:
        return make_user("fajar", "BRAND")

    def test_admin_updates_anyone(
        self, client: TestClient, admin: dict[str, str], other: dict[str, Any]
    ) -> None:
        resp = client.patch(
            URL, json={"id": other["id"], "role": "KOL_MANAGER"}, headers=admin
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "User fajar updated successfully"
        assert resp.json()["data"]["role"] == "KOL_MANAGER"

    def test_user_updates_self(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        me = make_user("gita", "BRAND")
        headers = _bearer(client, "gita@example.com")

        resp = client.patch(URL, json={"id": me["id"], "username": "gita2"}, headers=headers)
        assert resp.json()["data"]["username"] == "gita2"

    def test_user_cannot_update_others(
        self, client: TestClient, brand: dict[str, str], other: dict[str, Any]
    ) -> None:
        resp = client.patch(URL, json={"id": other["id"], "username": "x"}, headers=brand)
        assert resp.status_code == 403
        assert resp.json()["message"] == "You are not allowed to update other users"

    def test_user_cannot_change_own_role(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        me = make_user("gita", "BRAND")
        headers = _bearer(client, "gita@example.com")

        resp = client.patch(URL, json={"id": me["id"], "role": "ADMIN"}, headers=headers)
        assert resp.status_code == 403
        assert resp.json()["message"] == "You do not have permission to change roles"

    def test_user_cannot_set_password_here(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        me = make_user("gita", "BRAND")
        headers = _bearer(client, "gita@example.com")

        resp = client.patch(URL, json={"id": me["id"], "password": NEW_PASSWORD}, headers=headers)
        assert resp.status_code == 403

    def test_password_longer_than_72_bytes(
        self, client: TestClient, admin: dict[str, str], other: dict[str, Any]
    ) -> None:
        resp = client.patch(URL, json={"id": other["id"], "password": LONG_PASSWORD}, headers=admin)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Password must be at most 72 bytes long."

    def test_nothing_to_update(
        self, client: TestClient, admin: dict[str, str], other: dict[str, Any]
    ) -> None:
        resp = client.patch(URL, json={"id": other["id"]}, headers=admin)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "No data updated"}

    def test_username_taken(
        self, client: TestClient, admin: dict[str, str], other: dict[str, Any]
    ) -> None:
        resp = client.patch(URL, json={"id": other["id"], "username": "admin"}, headers=admin)
        assert resp.json()["message"] == "Email or username is already registered."

    def test_unknown_user(self, client: TestClient, admin: dict[str, str]) -> None:
        resp = client.patch(URL, json={"id": 999, "username": "ghost"}, headers=admin)
        assert resp.status_code == 404


class TestChangePassword:
    def test_change_then_login_with_new_password(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        make_user("hana", "BRAND")
        headers = _bearer(client, "hana@example.com")

        resp = client.post(
            f"{URL}/change-password",
            json={"oldPassword": TEST_PASSWORD, "newPassword": NEW_PASSWORD},
            headers=headers,
        )

        assert resp.json() == {"success": True, "message": "Password changed successfully"}
        _bearer(client, "hana@example.com", NEW_PASSWORD)

    def test_wrong_old_password(self, client: TestClient, brand: dict[str, str]) -> None:
        resp = client.post(
            f"{URL}/change-password",
            json={"oldPassword": "Wr0ng-pass!", "newPassword": NEW_PASSWORD},
            headers=brand,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Old password is invalid"

    def test_weak_new_password(self, client: TestClient, brand: dict[str, str]) -> None:
        resp = client.post(
            f"{URL}/change-password",
            json={"oldPassword": TEST_PASSWORD, "newPassword": "short"},
            headers=brand,
        )
        assert resp.json()["message"].startswith("The new password must have at least 8")

    def test_new_password_longer_than_72_bytes(
        self, client: TestClient, make_user: Callable[..., dict[str, Any]]
    ) -> None:
        make_user("hana", "BRAND")
        headers = _bearer(client, "hana@example.com")

        resp = client.post(
            f"{URL}/change-password",
            json={"oldPassword": TEST_PASSWORD, "newPassword": LONG_PASSWORD},
            headers=headers,
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == "Password must be at most 72 bytes long."
        _bearer(client, "hana@example.com")

    def test_requires_authentication(self, client: TestClient) -> None:
        resp = client.post(f"{URL}/change-password", json={})
        assert resp.status_code == 401


class TestDelete:
    def test_delete(
        self,
        client: TestClient,
        admin: dict[str, str],
        make_user: Callable[..., dict[str, Any]],
    ) -> None:
        user = make_user("ika", "BRAND")
        resp = client.delete(f"{URL}/{user['id']}", headers=admin)
        assert resp.json() == {"success": True, "message": "User data successfully deleted."}

    def test_brand_cannot_delete(self, client: TestClient, brand: dict[str, str]) -> None:
        assert client.delete(f"{URL}/1", headers=brand).status_code == 403
