"""
API tests for the tasks profile
"""
import pytest
from bson import ObjectId

from app.models.user import UserRole


@pytest.fixture
async def owner(make_user):
    return await make_user(role=UserRole.USER)


async def create_task(tasks_client, headers, **fields):
    body = {"title": "Write report"}
    body.update(fields)
    response = await tasks_client.post("/api/v1/tasks", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]


class TestTasksApi:
    async def test_create_task(self, tasks_client, owner, auth_headers):
        response = await tasks_client.post(
            "/api/v1/tasks", json={"title": "Write report", "priority": "high"}, headers=auth_headers(owner)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Task created successfully"
        assert body["data"]["priority"] == "high"
        assert body["data"]["user_id"] == str(owner["_id"])

    async def test_create_requires_auth(self, tasks_client):
        response = await tasks_client.post("/api/v1/tasks", json={"title": "x"})

        assert response.status_code == 401

    async def test_create_bad_priority(self, tasks_client, owner, auth_headers):
        response = await tasks_client.post(
            "/api/v1/tasks", json={"title": "x", "priority": "urgent"}, headers=auth_headers(owner)
        )

        assert response.status_code == 400
        assert "priority" in response.json()["error"]["details"]

    async def test_list_paginates(self, tasks_client, owner, auth_headers):
        headers = auth_headers(owner)
        for n in range(3):
            await create_task(tasks_client, headers, title=f"Task {n}")

        response = await tasks_client.get("/api/v1/tasks?page=1&limit=2", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}

    async def test_list_rejects_bad_limit(self, tasks_client, owner, auth_headers):
        response = await tasks_client.get("/api/v1/tasks?limit=500", headers=auth_headers(owner))

        assert response.status_code == 400

    async def test_update_and_delete(self, tasks_client, owner, auth_headers):
        headers = auth_headers(owner)
        task = await create_task(tasks_client, headers)

        updated = await tasks_client.put(
            f"/api/v1/tasks/{task['id']}", json={"status": "in_progress"}, headers=headers
        )
        deleted = await tasks_client.delete(f"/api/v1/tasks/{task['id']}", headers=headers)

        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "in_progress"
        assert deleted.json() == {"success": True, "message": "Task deleted"}

    async def test_other_user_forbidden(self, tasks_client, owner, make_user, auth_headers):
        task = await create_task(tasks_client, auth_headers(owner))
        intruder = await make_user(role=UserRole.USER)

        response = await tasks_client.delete(f"/api/v1/tasks/{task['id']}", headers=auth_headers(intruder))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "AUTHORIZATION_ERROR"

    async def test_admin_can_update_any(self, tasks_client, owner, make_user, auth_headers):
        task = await create_task(tasks_client, auth_headers(owner))
        admin = await make_user(role=UserRole.ADMIN)

        response = await tasks_client.put(
            f"/api/v1/tasks/{task['id']}", json={"title": "Reviewed"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Reviewed"

    @pytest.mark.parametrize("task_id", ["not-an-object-id", str(ObjectId())])
    async def test_unknown_task(self, tasks_client, owner, auth_headers, task_id):
        response = await tasks_client.put(
            f"/api/v1/tasks/{task_id}", json={"title": "x"}, headers=auth_headers(owner)
        )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Task not found"

    async def test_students_route_absent(self, tasks_client, owner, auth_headers):
        response = await tasks_client.get("/api/v1/students", headers=auth_headers(owner))

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Route not found"
