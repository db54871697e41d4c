"""Service providers for FastAPI routes.

The rate limiter is process-wide state and is created once; everything
else is cheap to build per request. Tests replace these through
app.dependency_overrides.
"""

from __future__ import annotations

from fastapi import Depends

from gym_planner.audit.audit_log import AuditLogService
from gym_planner.dashboard.service import DashboardService
from gym_planner.planning.ai_planner import AiPlannerService
from gym_planner.planning.pipeline import PlanGenerationPipeline
from gym_planner.services.rate_limiter import RateLimiter, build_rate_limiter

_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = build_rate_limiter()
    return _rate_limiter


def get_audit_log_service() -> AuditLogService:
    return AuditLogService()


def get_ai_planner_service() -> AiPlannerService:
    return AiPlannerService()


def get_generation_pipeline(
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    planner: AiPlannerService = Depends(get_ai_planner_service),
    audit_log: AuditLogService = Depends(get_audit_log_service),
) -> PlanGenerationPipeline:
    return PlanGenerationPipeline(rate_limiter=rate_limiter, planner=planner, audit_log=audit_log)


def get_dashboard_service() -> DashboardService:
    return DashboardService()
