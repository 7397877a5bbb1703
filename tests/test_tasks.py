"""Tests for task endpoints."""

import pytest
from httpx import AsyncClient


@pytest.fixture
def sample_task_data() -> dict:
    """Sample task data for testing."""
    return {"title": "Write release notes", "description": "v1.2"}


@pytest.mark.asyncio
async def test_tasks_require_auth(client: AsyncClient) -> None:
    """Task endpoints are protected."""
    response = await client.get("/api/tasks")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_and_get_task(
    client: AsyncClient, auth_headers: dict, sample_task_data: dict
) -> None:
    """Test creating a task and reading it back."""
    response = await client.post("/api/tasks", json=sample_task_data, headers=auth_headers)

    assert response.status_code == 200
    created = response.json()["data"]
    assert created["title"] == sample_task_data["title"]
    assert created["status"] == "pending"

    response = await client.get(f"/api/tasks/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["id"] == created["id"]


@pytest.mark.asyncio
async def test_list_tasks_paginates(client: AsyncClient, auth_headers: dict) -> None:
    """Test pagination metadata and status filtering."""
    for i in range(5):
        await client.post(
            "/api/tasks",
            json={"title": f"task {i}", "status": "completed" if i % 2 else "pending"},
            headers=auth_headers,
        )

    response = await client.get(
        "/api/tasks", params={"pageNum": 2, "pageSize": 2}, headers=auth_headers
    )
    page = response.json()["data"]
    assert page["total"] == 5
    assert page["pageNum"] == 2
    assert page["pageSize"] == 2
    assert page["totalPages"] == 3
    assert [task["title"] for task in page["list"]] == ["task 2", "task 3"]

    response = await client.get(
        "/api/tasks", params={"status": "completed"}, headers=auth_headers
    )
    assert response.json()["data"]["total"] == 2


@pytest.mark.asyncio
async def test_list_tasks_rejects_oversized_page(client: AsyncClient, auth_headers: dict) -> None:
    """Page size is capped at 100."""
    response = await client.get("/api/tasks", params={"pageSize": 101}, headers=auth_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_task(
    client: AsyncClient, auth_headers: dict, sample_task_data: dict
) -> None:
    """Test partially updating a task."""
    created = (
        await client.post("/api/tasks", json=sample_task_data, headers=auth_headers)
    ).json()["data"]

    response = await client.patch(
        f"/api/tasks/{created['id']}", json={"status": "in_progress"}, headers=auth_headers
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["status"] == "in_progress"
    assert updated["title"] == sample_task_data["title"]


@pytest.mark.asyncio
async def test_delete_task(
    client: AsyncClient, auth_headers: dict, sample_task_data: dict
) -> None:
    """Test deleting a task."""
    created = (
        await client.post("/api/tasks", json=sample_task_data, headers=auth_headers)
    ).json()["data"]

    response = await client.delete(f"/api/tasks/{created['id']}", headers=auth_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/tasks/{created['id']}", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"code": 404, "message": "Task not found"}


@pytest.mark.asyncio
async def test_missing_task(client: AsyncClient, auth_headers: dict) -> None:
    """Unknown tasks are a 404 for every operation."""
    assert (await client.patch("/api/tasks/999", json={}, headers=auth_headers)).status_code == 404
    assert (await client.delete("/api/tasks/999", headers=auth_headers)).status_code == 404
