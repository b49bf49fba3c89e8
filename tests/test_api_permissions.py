"""
Tests for the permission API endpoints.

Tests FastAPI routes with in-memory adapters injected through
dependency overrides. Validates authentication, request validation,
response schemas, and error mapping.
"""

import time
from unittest.mock import MagicMock

import jwt
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.domain.permissions.entities import ManagedUser, PermissionMode
from app.domain.permissions.errors import PermissionStoreError
from app.domain.permissions.ports import UserDirectory
from app.domain.permissions.resolver import PermissionResolver
from app.interfaces.permissions.dependencies import (
    get_fallback_cache,
    get_permission_resolver,
    get_user_directory,
)
from app.main import app

PERMISSION_URL = "/api/v1/trade/permission"
ADMIN_URL = "/api/v1/admin/trade-permission"


def _token(sub: str, **claims) -> str:
    payload = {
        "sub": sub,
        "aud": settings.jwt_audience,
        "exp": int(time.time()) + 3600,
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _auth(sub: str, **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {_token(sub, **claims)}"}


@pytest.fixture
def directory() -> MagicMock:
    users = {
        "u1": ManagedUser(id="u1", username="ann", email="ann@x.io", managed_by="sub-1"),
        "u2": ManagedUser(id="u2", username="bob", email="bob@x.io", managed_by=None),
    }
    directory = MagicMock(spec=UserDirectory)
    directory.get_user.side_effect = users.get
    directory.list_users.return_value = list(users.values())
    return directory


@pytest.fixture
def client(store, cache, directory):
    resolver = PermissionResolver(store, cache)
    app.dependency_overrides[get_permission_resolver] = lambda: resolver
    app.dependency_overrides[get_user_directory] = lambda: directory
    app.dependency_overrides[get_fallback_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Tests for GET /api/v1/health."""

    def test_health(self, client, cache) -> None:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "version": settings.version,
            "fallback_cache_entries": 0,
        }


class TestOwnPermissionEndpoint:
    """Tests for GET /api/v1/trade/permission."""

    def test_requires_token(self, client) -> None:
        response = client.get(PERMISSION_URL)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_rejects_bad_signature(self, client) -> None:
        token = jwt.encode(
            {"sub": "u1", "aud": settings.jwt_audience, "exp": int(time.time()) + 60},
            "another-secret",
            algorithm="HS256",
        )
        response = client.get(PERMISSION_URL, headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_rejects_expired_token(self, client) -> None:
        response = client.get(PERMISSION_URL, headers=_auth("u1", exp=int(time.time()) - 10))
        assert response.status_code == 401

    def test_default_for_new_user(self, client) -> None:
        response = client.get(PERMISSION_URL, headers=_auth("u2"))
        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "permissionMode": "ALL_LOSS",
            "buyEnabled": False,
            "sellEnabled": False,
            "source": "default",
        }

    def test_stored_permission(self, client, store, cache) -> None:
        PermissionResolver(store, cache).set("u1", PermissionMode.BUY_ALL_WIN)

        body = client.get(PERMISSION_URL, headers=_auth("u1")).json()

        assert body["permissionMode"] == "BUY_ALL_WIN"
        assert body["buyEnabled"] is True
        assert body["source"] == "db"

    def test_store_failure_is_generic_500(self, client, store) -> None:
        store.failure = PermissionStoreError("password authentication failed")

        response = client.get(PERMISSION_URL, headers=_auth("u1"))

        assert response.status_code == 500
        assert response.json() == {"error": "Permission lookup failed"}

    def test_security_headers_present(self, client) -> None:
        response = client.get(PERMISSION_URL, headers=_auth("u1"))
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"


class TestAdminListEndpoint:
    """Tests for GET /api/v1/admin/trade-permission."""

    def test_user_token_rejected(self, client) -> None:
        response = client.get(ADMIN_URL, headers=_auth("u1", role="authenticated"))
        assert response.status_code == 401

    def test_lists_users_with_permissions(self, client, store, cache) -> None:
        PermissionResolver(store, cache).set("u1", PermissionMode.SELL_ALL_WIN)

        response = client.get(ADMIN_URL, headers=_auth("root-1", admin_role="admin"))

        assert response.status_code == 200
        users = response.json()["users"]
        assert [u["id"] for u in users] == ["u1", "u2"]
        assert users[0] == {
            "id": "u1",
            "username": "ann",
            "email": "ann@x.io",
            "permissionMode": "SELL_ALL_WIN",
            "buyEnabled": False,
            "sellEnabled": True,
            "source": "db",
        }
        assert users[1]["source"] == "default"

    def test_managed_by_filter(self, client, directory) -> None:
        client.get(
            ADMIN_URL,
            params={"managedBy": "UNASSIGNED"},
            headers=_auth("root-1", admin_role="superadmin"),
        )
        assert directory.list_users.call_args[0][0].kind == "unassigned"


class TestAdminSetEndpoint:
    """Tests for POST /api/v1/admin/trade-permission."""

    def test_sets_permission(self, client) -> None:
        response = client.post(
            ADMIN_URL,
            json={"userId": "u2", "permissionMode": " random_win_loss "},
            headers=_auth("root-1", admin_role="admin"),
        )

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "userId": "u2",
            "permissionMode": "RANDOM_WIN_LOSS",
            "buyEnabled": True,
            "sellEnabled": True,
            "source": "db",
        }

    def test_then_user_reads_same_value(self, client) -> None:
        client.post(
            ADMIN_URL,
            json={"userId": "u1", "permissionMode": "BUY_ALL_WIN"},
            headers=_auth("sub-1", admin_role="sub-admin"),
        )
        body = client.get(PERMISSION_URL, headers=_auth("u1")).json()
        assert body["permissionMode"] == "BUY_ALL_WIN"
        assert body["source"] == "db"

    @pytest.mark.parametrize(
        "payload",
        [
            {"userId": "u1", "permissionMode": "ALWAYS_WIN"},
            {"userId": "   ", "permissionMode": "ALL_LOSS"},
            {"permissionMode": "ALL_LOSS"},
            {"userId": "u1"},
        ],
    )
    def test_invalid_payload_rejected(self, client, store, payload) -> None:
        response = client.post(
            ADMIN_URL, json=payload, headers=_auth("root-1", admin_role="admin")
        )
        assert response.status_code == 422
        assert store.rows == {}

    def test_sub_admin_outside_scope_forbidden(self, client, store) -> None:
        response = client.post(
            ADMIN_URL,
            json={"userId": "u2", "permissionMode": "BUY_ALL_WIN"},
            headers=_auth("sub-1", admin_role="subadmin"),
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}
        assert store.rows == {}

    def test_missing_table_reports_memory(self, client, store, cache) -> None:
        store.stage = "absent"

        response = client.post(
            ADMIN_URL,
            json={"userId": "u2", "permissionMode": "SELL_ALL_WIN"},
            headers=_auth("root-1", admin_role="admin"),
        )

        assert response.status_code == 200
        assert response.json()["source"] == "memory"
        assert client.get("/api/v1/health").json()["fallback_cache_entries"] == 1
        assert client.get(PERMISSION_URL, headers=_auth("u2")).json()["source"] == "memory"

    def test_validation_error_documented_as_fastapi_detail(self) -> None:
        responses = app.openapi()["paths"][ADMIN_URL]["post"]["responses"]
        ref = responses["422"]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/HTTPValidationError")
