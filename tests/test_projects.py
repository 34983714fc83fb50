"""
Test project endpoints
"""

import asyncio

import pytest
from httpx import AsyncClient

from tests.conftest import PROJECT_PAYLOAD, auth_headers


@pytest.fixture
async def alice(signup) -> str:
    await signup("alice")
    return "alice"


@pytest.mark.asyncio
async def test_create_project(client: AsyncClient, alice: str, create_project):
    """Test project creation round-trips every field"""
    response = await create_project(alice, status="InProgress", deadline="2025-05-31")
    assert response.status_code == 201
    data = response.json()
    assert data["project_id"] == 1
    assert data["status"] == "InProgress"
    assert data["deadline"] == "2025-05-31"
    assert data["title"] == PROJECT_PAYLOAD["title"]
    assert data["estimated_fee"] == PROJECT_PAYLOAD["estimated_fee"]
    assert "id" not in data
    assert "user_id" not in data

    response = await client.get(f"/{alice}/projects/1", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json() == data


@pytest.mark.asyncio
async def test_create_project_optional_fields(client: AsyncClient, alice: str):
    """Test that description and estimated_fee default when omitted"""
    payload = {key: value for key, value in PROJECT_PAYLOAD.items() if key not in ("description", "estimated_fee")}

    response = await client.post(f"/{alice}/projects", json=payload, headers=auth_headers(alice))
    assert response.status_code == 201
    assert response.json()["description"] == ""
    assert response.json()["estimated_fee"] == 0


@pytest.mark.asyncio
async def test_project_numbers_are_per_user(client: AsyncClient, signup, create_project):
    """Test that each user numbers their projects from 1"""
    await signup("a")
    await signup("b")

    assert (await create_project("a")).json()["project_id"] == 1
    assert (await create_project("a")).json()["project_id"] == 2
    assert (await create_project("b")).json()["project_id"] == 1


@pytest.mark.asyncio
async def test_invalid_status_consumes_no_number(client: AsyncClient, alice: str, create_project):
    """Test that a rejected project leaves no row and no gap"""
    response = await create_project(alice, status="Planning")
    assert response.status_code == 400

    projects = (await client.get(f"/{alice}/projects", headers=auth_headers(alice))).json()
    assert projects == []

    response = await create_project(alice)
    assert response.status_code == 201
    assert response.json()["project_id"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("deadline", ["2025/05/31", "31-05-2025", "2025-5-31", "2025-02-30", "tomorrow"])
async def test_invalid_deadline(client: AsyncClient, alice: str, create_project, deadline: str):
    """Test that deadlines must be YYYY-MM-DD calendar dates"""
    response = await create_project(alice, deadline=deadline)
    assert response.status_code == 400
    data = response.json()
    assert data["detail"] == "Date format is invalid (yyyy-MM-dd)"
    assert data["field"] == "deadline"


@pytest.mark.asyncio
async def test_missing_fields(client: AsyncClient, alice: str):
    """Test that required fields are listed in the error"""
    response = await client.post(f"/{alice}/projects", json={"title": "Only a title"}, headers=auth_headers(alice))
    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert {"platform", "client", "status", "deadline"} <= fields


@pytest.mark.asyncio
@pytest.mark.parametrize("pid", ["abc", "-1", "1.5"])
async def test_invalid_project_number(client: AsyncClient, alice: str, pid: str):
    """Test that a non-integer project number is an invalid id"""
    response = await client.get(f"/{alice}/projects/{pid}", headers=auth_headers(alice))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid id"


@pytest.mark.asyncio
async def test_unknown_project(client: AsyncClient, alice: str):
    """Test getting a project that does not exist"""
    response = await client.get(f"/{alice}/projects/999", headers=auth_headers(alice))
    assert response.status_code == 404
    assert response.json()["detail"] == "Project not found"


@pytest.mark.asyncio
async def test_other_users_project_is_forbidden(client: AsyncClient, signup, create_project):
    """Test that another user's credential never reaches a project"""
    await signup("a")
    await signup("b")
    await create_project("a")

    headers = auth_headers("b")
    responses = [
        await client.get("/a/projects", headers=headers),
        await client.post("/a/projects", json=PROJECT_PAYLOAD, headers=headers),
        await client.get("/a/projects/1", headers=headers),
        await client.patch("/a/projects/1", json={"title": "Hijacked"}, headers=headers),
        await client.delete("/a/projects/1", headers=headers),
    ]
    assert [response.status_code for response in responses] == [403] * 5

    project = (await client.get("/a/projects/1", headers=auth_headers("a"))).json()
    assert project["title"] == PROJECT_PAYLOAD["title"]


@pytest.mark.asyncio
async def test_project_numbers_do_not_cross_users(client: AsyncClient, signup, create_project):
    """Test that b's own path never resolves a's project numbers"""
    await signup("a")
    await signup("b")
    await create_project("a")

    response = await client.get("/b/projects/1", headers=auth_headers("b"))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_projects(client: AsyncClient, alice: str, create_project):
    """Test listing projects in number order"""
    for title in ("First", "Second", "Third"):
        await create_project(alice, title=title)

    response = await client.get(f"/{alice}/projects", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()
    assert [project["project_id"] for project in data] == [1, 2, 3]
    assert [project["title"] for project in data] == ["First", "Second", "Third"]


@pytest.mark.asyncio
async def test_update_project(client: AsyncClient, alice: str, create_project):
    """Test that only the fields sent are replaced"""
    created = (await create_project(alice)).json()

    response = await client.patch(
        f"/{alice}/projects/1",
        json={"status": "Completed", "deadline": "2025-06-30"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Completed"
    assert data["deadline"] == "2025-06-30"
    assert data["title"] == created["title"]
    assert data["client"] == created["client"]
    assert data["project_id"] == 1


@pytest.mark.asyncio
async def test_update_project_keeps_identity(client: AsyncClient, alice: str, create_project):
    """Test that id, number and owner cannot be patched"""
    await create_project(alice)

    response = await client.patch(
        f"/{alice}/projects/1",
        json={"project_id": 7, "id": 7, "user_id": 7, "title": "Renamed"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    assert response.json()["project_id"] == 1

    owner_view = (await client.get("/admin/projects")).json()
    assert owner_view[0]["project_id"] == 1
    assert (owner_view[0]["id"], owner_view[0]["user_id"]) == (1, 1)
    assert owner_view[0]["title"] == "Renamed"


@pytest.mark.asyncio
async def test_update_project_invalid_values(client: AsyncClient, alice: str, create_project):
    """Test that updates validate status and deadline"""
    await create_project(alice)

    response = await client.patch(f"/{alice}/projects/1", json={"status": "Planning"}, headers=auth_headers(alice))
    assert response.status_code == 400

    response = await client.patch(f"/{alice}/projects/1", json={"deadline": "June"}, headers=auth_headers(alice))
    assert response.status_code == 400
    assert response.json()["field"] == "deadline"

    project = (await client.get(f"/{alice}/projects/1", headers=auth_headers(alice))).json()
    assert project["status"] == PROJECT_PAYLOAD["status"]
    assert project["deadline"] == PROJECT_PAYLOAD["deadline"]


@pytest.mark.asyncio
async def test_update_unknown_project(client: AsyncClient, alice: str):
    """Test updating a project that does not exist"""
    response = await client.patch(f"/{alice}/projects/5", json={"title": "x"}, headers=auth_headers(alice))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_project(client: AsyncClient, alice: str, create_project):
    """Test soft-deleting a project"""
    await create_project(alice)

    response = await client.delete(f"/{alice}/projects/1", headers=auth_headers(alice))
    assert response.status_code == 204

    assert (await client.get(f"/{alice}/projects/1", headers=auth_headers(alice))).status_code == 404
    assert (await client.get(f"/{alice}/projects", headers=auth_headers(alice))).json() == []

    # A second delete finds nothing
    response = await client.delete(f"/{alice}/projects/1", headers=auth_headers(alice))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_project_cascades_to_tasks(client: AsyncClient, alice: str, create_project, create_task):
    """Test that a soft-deleted project takes its tasks along"""
    await create_project(alice)
    await create_task(alice, 1)
    await create_task(alice, 1)

    assert (await client.delete(f"/{alice}/projects/1", headers=auth_headers(alice))).status_code == 204

    tasks = (await client.get("/admin/tasks")).json()
    assert len(tasks) == 2
    assert all(task["deleted_at"] is not None for task in tasks)

    projects = (await client.get("/admin/projects")).json()
    assert projects[0]["deleted_at"] is not None


@pytest.mark.asyncio
async def test_numbers_are_not_reused_after_delete(client: AsyncClient, alice: str, create_project):
    """Test that deleting the newest project does not free its number"""
    await create_project(alice)
    await create_project(alice)
    assert (await client.delete(f"/{alice}/projects/2", headers=auth_headers(alice))).status_code == 204

    response = await create_project(alice)
    assert response.json()["project_id"] == 3

    project_id = next(p["id"] for p in (await client.get("/admin/projects")).json() if p["project_id"] == 3)
    assert (await client.delete(f"/admin/projects/{project_id}")).status_code == 204

    response = await create_project(alice)
    assert response.json()["project_id"] == 4


@pytest.mark.asyncio
async def test_concurrent_creates_get_consecutive_numbers(client: AsyncClient, alice: str, create_project):
    """Test that simultaneous creates for one user never share a number"""
    responses = await asyncio.gather(*(create_project(alice, title=f"Project {i}") for i in range(10)))

    assert all(response.status_code == 201 for response in responses)
    numbers = sorted(response.json()["project_id"] for response in responses)
    assert numbers == list(range(1, 11))
