"""
API tests for the health endpoint
"""
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient

from app.main import create_app


class TestHealthEndpoint:
    async def test_healthy(self, client):
        response = await client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["database"] == {"status": "healthy", "db_status": "connected"}
        assert "timestamp" in body

    async def test_unhealthy_is_503(self, client, db_manager):
        db_manager.health_check = AsyncMock(
            return_value={"status": "unhealthy", "db_status": "connected", "error": "ping failed"}
        )

        response = await client.get("/api/v1/health")

        assert response.status_code == 503
        assert response.json()["database"]["error"] == "ping failed"

    async def test_without_manager(self):
        app = create_app("grading")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/api/v1/health")

        assert response.status_code == 503
        assert response.json()["database"]["db_status"] == "disconnected"

    async def test_root_reports_profile(self, tasks_client):
        response = await tasks_client.get("/")

        assert response.json()["profile"] == "tasks"
