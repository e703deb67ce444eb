from fastapi import APIRouter, Depends, Query
from typing import Annotated, List

from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.modules.activity.schemas import ActivityListParams, ActivityLogResponse, DashboardStats
from mall_admin.modules.activity.service import ActivityService

router = APIRouter(prefix="/activity", tags=["activity"])


def get_activity_service(backends: Backends = Depends(get_backends)) -> ActivityService:
    return ActivityService(backends)


@router.get("", response_model=Page[ActivityLogResponse])
async def list_activity_logs(
    params: Annotated[ActivityListParams, Query()],
    user: AuthUser = Depends(require_permission("activity_logs", "view")),
    service: ActivityService = Depends(get_activity_service)
):
    """List audit entries, newest first, with the acting admin attached"""
    return service.list_logs(params)


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard_stats(
    days: int = Query(30, ge=1, le=365),
    user: AuthUser = Depends(require_permission("dashboard", "view")),
    service: ActivityService = Depends(get_activity_service)
):
    """Content counts, activity per day and per module over the last `days` days, and the latest entries"""
    return service.dashboard_stats(days)


@router.get("/recent", response_model=List[ActivityLogResponse])
async def recent_activity(
    limit: int = Query(10, ge=1, le=100),
    user: AuthUser = Depends(require_permission("dashboard", "view")),
    service: ActivityService = Depends(get_activity_service)
):
    return service.recent_activity(limit)


@router.get("/{log_id}", response_model=ActivityLogResponse)
async def get_activity_log(
    log_id: str,
    user: AuthUser = Depends(require_permission("activity_logs", "view")),
    service: ActivityService = Depends(get_activity_service)
):
    return service.get_log(log_id)
