from fastapi import APIRouter, Body, Depends
from typing import Any, Dict, List, Literal, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.settings.schemas import InjectionPoint, SettingType, SiteSettingResponse
from mall_admin.modules.settings.service import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])

SettingsGroupName = Literal["general", "contact", "social", "seo", "analytics", "operating_hours"]


def get_settings_service(backends: Backends = Depends(get_backends)) -> SettingsService:
    return SettingsService(backends)


@router.get("/site", response_model=List[SiteSettingResponse])
async def list_settings(
    setting_type: Optional[SettingType] = None,
    injection_point: Optional[InjectionPoint] = None,
    user: AuthUser = Depends(require_permission("seo_settings", "view")),
    service: SettingsService = Depends(get_settings_service)
):
    """List injected site settings (scripts, meta tags, links)"""
    return service.list_settings(setting_type, injection_point)


@router.post("/site", status_code=201)
async def create_setting(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: SettingsService = Depends(get_settings_service)
):
    return respond(service.create_setting(ctx, payload), 201)


@router.get("/site/active/{injection_point}", response_model=List[SiteSettingResponse])
async def active_settings(
    injection_point: InjectionPoint,
    user: AuthUser = Depends(require_permission("seo_settings", "view")),
    service: SettingsService = Depends(get_settings_service)
):
    return service.active_settings(injection_point)


@router.get("/site/key/{key}", response_model=SiteSettingResponse)
async def get_setting_by_key(
    key: str,
    user: AuthUser = Depends(require_permission("seo_settings", "view")),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_setting_by_key(key)


@router.get("/site/{setting_id}", response_model=SiteSettingResponse)
async def get_setting(
    setting_id: str,
    user: AuthUser = Depends(require_permission("seo_settings", "view")),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_setting(setting_id)


@router.put("/site/{setting_id}")
async def update_setting(
    setting_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: SettingsService = Depends(get_settings_service)
):
    return respond(service.update_setting(ctx, setting_id, payload))


@router.patch("/site/{setting_id}/status")
async def toggle_setting(
    setting_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: SettingsService = Depends(get_settings_service)
):
    return respond(service.toggle_setting(ctx, setting_id, toggle.value if toggle else None))


@router.delete("/site/{setting_id}")
async def delete_setting(
    setting_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: SettingsService = Depends(get_settings_service)
):
    return respond(service.delete_setting(ctx, setting_id))


# Settings groups
@router.get("/groups/{group}", response_model=Dict[str, Any])
async def get_settings_group(
    group: SettingsGroupName,
    user: AuthUser = Depends(require_permission("seo_settings", "view")),
    service: SettingsService = Depends(get_settings_service)
):
    return service.get_group(group)


@router.put("/groups/{group}")
async def save_settings_group(
    group: SettingsGroupName,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: SettingsService = Depends(get_settings_service)
):
    return respond(service.save_group(ctx, group, payload))
