"""Role-gated dashboard endpoints serving mock statistics."""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..dependencies import require_role
from ..models import Role, User
from ..schemas import (
    ActivityItem,
    EmployeeDashboard,
    ManagementDashboard,
    TraineeDashboard,
    UpdateItem,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _now() -> datetime:
    return datetime.now(timezone.utc)


@router.get("/management", response_model=ManagementDashboard)
async def management_dashboard(
    current_user: User = Depends(require_role(Role.MANAGEMENT)),
) -> ManagementDashboard:
    """Organisation-wide figures for management."""

    now = _now()
    return ManagementDashboard(
        total_employees=1250,
        active_projects=45,
        pending_approvals=12,
        recent_activities=[
            ActivityItem(id=1, action="New project approved", timestamp=now),
            ActivityItem(id=2, action="Employee onboarding completed", timestamp=now),
            ActivityItem(id=3, action="Budget review scheduled", timestamp=now),
        ],
    )


@router.get("/employee", response_model=EmployeeDashboard)
async def employee_dashboard(
    current_user: User = Depends(require_role(Role.EMPLOYEE)),
) -> EmployeeDashboard:
    """Task overview for employees."""

    now = _now()
    return EmployeeDashboard(
        assigned_tasks=8,
        completed_tasks=23,
        upcoming_deadlines=3,
        recent_updates=[
            UpdateItem(id=1, title="Project milestone completed", date=now),
            UpdateItem(id=2, title="Training session scheduled", date=now),
            UpdateItem(id=3, title="Performance review due", date=now),
        ],
    )


@router.get("/trainee", response_model=TraineeDashboard)
async def trainee_dashboard(
    current_user: User = Depends(require_role(Role.TRAINEE)),
) -> TraineeDashboard:
    """Training progress for trainees."""

    now = _now()
    return TraineeDashboard(
        training_progress=65,
        completed_modules=8,
        total_modules=12,
        next_assignment="Safety Protocols Assessment",
        mentor="Dr. Sarah Johnson",
        upcoming_training=[
            UpdateItem(id=1, title="Advanced Engineering Principles", date=now),
            UpdateItem(id=2, title="Project Management Basics", date=now),
        ],
    )
