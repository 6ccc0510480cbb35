"""Role gating for the dashboard endpoints."""
import pytest
from httpx import AsyncClient

from conftest import registration

ROLES = ("management", "employee", "trainee")


async def _register_as(client: AsyncClient, role: str) -> None:
    response = await client.post(
        "/api/register",
        json=registration(username=f"{role}-user", email=f"{role}@eil.com", role=role),
    )
    assert response.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ROLES)
async def test_dashboard_requires_session(client: AsyncClient, role: str) -> None:
    response = await client.get(f"/api/dashboard/{role}")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_employee_cannot_open_management_dashboard(client: AsyncClient) -> None:
    await _register_as(client, "employee")

    response = await client.get("/api/dashboard/management")

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("role", ROLES)
async def test_each_role_sees_only_its_dashboard(client: AsyncClient, role: str) -> None:
    await _register_as(client, role)

    for other in ROLES:
        response = await client.get(f"/api/dashboard/{other}")
        assert response.status_code == (200 if other == role else 403)


@pytest.mark.asyncio
async def test_management_payload(client: AsyncClient) -> None:
    await _register_as(client, "management")

    body = (await client.get("/api/dashboard/management")).json()

    assert body["totalEmployees"] == 1250
    assert body["activeProjects"] == 45
    assert body["pendingApprovals"] == 12
    assert len(body["recentActivities"]) == 3


@pytest.mark.asyncio
async def test_employee_payload(client: AsyncClient) -> None:
    await _register_as(client, "employee")

    body = (await client.get("/api/dashboard/employee")).json()

    assert body["assignedTasks"] == 8
    assert body["completedTasks"] == 23
    assert [item["id"] for item in body["recentUpdates"]] == [1, 2, 3]


@pytest.mark.asyncio
async def test_trainee_payload(client: AsyncClient) -> None:
    await _register_as(client, "trainee")

    body = (await client.get("/api/dashboard/trainee")).json()

    assert body["trainingProgress"] == 65
    assert body["totalModules"] == 12
    assert body["mentor"] == "Dr. Sarah Johnson"
    assert len(body["upcomingTraining"]) == 2
