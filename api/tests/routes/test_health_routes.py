"""Tests for health_routes."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

pytestmark = pytest.mark.unit


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "habit-battles-api"}

    async def test_security_headers(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-Duration-Ms" in response.headers


class TestReady:
    async def test_ready_when_db_reachable(self, client: AsyncClient, app: FastAPI):
        app.state.engine = object()
        with patch(
            "routes.health_routes.check_db_connection", new_callable=AsyncMock
        ):
            response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_503_while_starting(self, client: AsyncClient, app: FastAPI):
        app.state.init_done = False

        response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["detail"] == "Starting"

    async def test_503_after_failed_init(self, client: AsyncClient, app: FastAPI):
        app.state.init_error = "migration failed"

        response = await client.get("/ready")

        assert response.status_code == 503
        assert "migration failed" in response.json()["detail"]

    async def test_503_when_db_unreachable(self, client: AsyncClient, app: FastAPI):
        app.state.engine = object()
        with patch(
            "routes.health_routes.check_db_connection",
            new_callable=AsyncMock,
            side_effect=ConnectionError("refused"),
        ):
            response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["detail"] == "Database unavailable"
