"""
Integration tests for the API-wide exception handlers in taskboard/main.py.

Store failures must surface as 503/500 with a generic message, never as
raw database errors. Domain errors keep their own status, and only
401 responses carry a bearer challenge.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import DatabaseError, OperationalError

from taskboard.api.dependencies import get_db
from taskboard.main import app
from tests.factories.user import auth_headers_for


class FailingSession:
    """Session stand-in whose every query fails with `error`."""

    def __init__(self, error):
        self.error = error

    async def execute(self, *args, **kwargs):
        raise self.error

    async def get(self, *args, **kwargs):
        raise self.error


def failing_db(error):
    async def override_get_db():
        yield FailingSession(error)
    return override_get_db


@pytest.mark.asyncio
class TestStoreErrors:

    async def test_locked_database_is_unavailable(self, client: AsyncClient):
        app.dependency_overrides[get_db] = failing_db(
            OperationalError("SELECT 1", {}, Exception("database is locked"))
        )

        response = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "whatever"}
        )

        assert response.status_code == 503
        assert response.json() == {"detail": "Service temporarily unavailable"}

    async def test_other_store_errors_are_internal(self, client: AsyncClient):
        app.dependency_overrides[get_db] = failing_db(
            DatabaseError("SELECT 1", {}, Exception("disk I/O error"))
        )

        response = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "whatever"}
        )

        assert response.status_code == 500
        assert "disk" not in response.text


@pytest.mark.asyncio
class TestValidationErrors:

    async def test_validation_errors_are_bad_requests(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "alice@example.com"})

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Invalid request"
        assert body["errors"][0]["loc"] == ["body", "password"]


@pytest.mark.asyncio
class TestDomainErrors:

    async def test_forbidden_has_no_bearer_challenge(self, client: AsyncClient, other_user, team):
        response = await client.get(f"/api/teams/{team.id}/members", headers=auth_headers_for(other_user))

        assert response.status_code == 403
        assert "www-authenticate" not in response.headers
