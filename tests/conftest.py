"""Shared pytest fixtures for the KOL campaign backend test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from kolhub.app import create_app, initialize_services
from kolhub.config import Settings, get_settings
from kolhub.domain.models import Principal
from kolhub.persistence import Gateway, close_db, init_db

TEST_PASSWORD = "Passw0rd!"


@pytest.fixture
def gateway() -> Iterator[Gateway]:
    """A gateway over a fresh in-memory database with the full schema."""
    conn = init_db(":memory:")
    yield Gateway(conn)
    close_db(conn)


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory, metrics-free test application."""
    get_settings.cache_clear()
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        database_path=Path(":memory:"),
        jwt_secret=SecretStr("test-secret"),
        bcrypt_rounds=4,
        metrics_enabled=False,
    )


@pytest.fixture
def services(settings: Settings) -> Iterator[dict[str, Any]]:
    """Fully initialized services over an in-memory database."""
    svc = initialize_services(settings)
    yield svc
    close_db(svc["db_conn"])


@pytest.fixture
def client(services: dict[str, Any]) -> TestClient:
    """TestClient for the complete application."""
    return TestClient(create_app(services))


@pytest.fixture
def make_user(services: dict[str, Any]) -> Callable[..., dict[str, Any]]:
    """Insert a user directly and return the stored row."""

    def _make(username: str, role: str, password: str = TEST_PASSWORD) -> dict[str, Any]:
        return services["gateway"].create(
            "users",
            {
                "username": username,
                "email": f"{username}@example.com",
                "password": services["hasher"].hash(password),
                "role": role,
            },
        )

    return _make


@pytest.fixture
def auth_headers(
    services: dict[str, Any], make_user: Callable[..., dict[str, Any]]
) -> Callable[[str], dict[str, str]]:
    """Return ``Authorization`` headers for a freshly created user of a role."""
    created: dict[str, dict[str, Any]] = {}

    def _headers(role: str) -> dict[str, str]:
        if role not in created:
            created[role] = make_user(role.lower(), role)
        user = created[role]
        token = services["tokens"].issue(
            Principal(id=user["id"], username=user["username"], role=user["role"])
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def manager(auth_headers: Callable[[str], dict[str, str]]) -> dict[str, str]:
    return auth_headers("KOL_MANAGER")


@pytest.fixture
def admin(auth_headers: Callable[[str], dict[str, str]]) -> dict[str, str]:
    return auth_headers("ADMIN")


@pytest.fixture
def brand(auth_headers: Callable[[str], dict[str, str]]) -> dict[str, str]:
    return auth_headers("BRAND")


def _kol_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Ayu Lestari",
        "niche": "BEAUTY",
        "followers": 120000,
        "engagement_rate": 3.5,
        "reach": 45000,
        "rate_card": 2500000.0,
        "audience_male": 20.0,
        "audience_female": 80.0,
        "audience_age_range": "AGE_18_24",
    }
    payload.update(overrides)
    return payload


def _report_payload(campaign_id: int, kol_id: int, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "campaign_id": campaign_id,
        "kol_id": kol_id,
        "like_count": 100,
        "comment_count": 10,
        "share_count": 5,
        "save_count": 2,
        "engagement": 117.0,
        "reach": 4000,
        "er": 2.9,
        "cpe": 1500.0,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def seed(gateway: Gateway) -> Callable[..., dict[str, Any]]:
    """Insert one row into *table* on the bare ``gateway`` fixture."""

    def _seed(table: str, **fields: Any) -> dict[str, Any]:
        return gateway.create(table, fields)

    return _seed


@pytest.fixture
def kol_payload() -> Callable[..., dict[str, Any]]:
    """Builder for a complete, valid KOL payload."""
    return _kol_payload


@pytest.fixture
def report_payload() -> Callable[..., dict[str, Any]]:
    """Builder for a complete, valid report payload."""
    return _report_payload
