"""Dashboard endpoint."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger

from gym_planner.api.dependencies.auth import get_current_user_id
from gym_planner.api.dependencies.services import get_dashboard_service
from gym_planner.dashboard.service import DashboardService
from gym_planner.schemas.dashboard import DashboardSummary

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(
    user_id: str = Depends(get_current_user_id),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    """Get upcoming workouts and user state for the authenticated user."""
    try:
        return dashboard_service.get_dashboard_summary(user_id)
    except Exception:
        logger.exception("Failed to retrieve dashboard data", user_id=user_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "InternalServerError", "message": "Failed to retrieve dashboard data"},
        )
