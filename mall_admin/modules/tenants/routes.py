from fastapi import APIRouter, Body, Depends, Query
from typing import Annotated, Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.tenants.schemas import TenantCategoryResponse, TenantListParams, TenantResponse
from mall_admin.modules.tenants.service import TenantService

router = APIRouter(prefix="/tenants", tags=["tenants"])


def get_tenant_service(backends: Backends = Depends(get_backends)) -> TenantService:
    return TenantService(backends)


@router.get("", response_model=Page[TenantResponse])
async def list_tenants(
    params: Annotated[TenantListParams, Query()],
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    """List tenants with search, category/floor/status filters and pagination"""
    return service.list_tenants(params)


@router.post("", status_code=201)
async def create_tenant(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.create_tenant(ctx, payload), 201)


@router.get("/floors", response_model=List[str])
async def list_floors(
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.list_floors()


# Category endpoints
@router.get("/categories", response_model=List[TenantCategoryResponse])
async def list_categories(
    active_only: bool = False,
    user: AuthUser = Depends(require_permission("tenant_categories", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    """List tenant categories with the number of tenants in each"""
    return service.list_categories(active_only=active_only)


@router.post("/categories", status_code=201)
async def create_category(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.create_category(ctx, payload), 201)


@router.get("/categories/{category_id}", response_model=TenantCategoryResponse)
async def get_category(
    category_id: str,
    user: AuthUser = Depends(require_permission("tenant_categories", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.get_category(category_id)


@router.put("/categories/{category_id}")
async def update_category(
    category_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.update_category(ctx, category_id, payload))


@router.patch("/categories/{category_id}/status")
async def toggle_category_status(
    category_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.toggle_category_status(ctx, category_id, toggle.value if toggle else None))


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    """Delete a category; refused while tenants still belong to it"""
    return respond(service.delete_category(ctx, category_id))


# Tenant endpoints
@router.get("/code/{tenant_code}", response_model=TenantResponse)
async def get_tenant_by_code(
    tenant_code: str,
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.get_tenant_by_code(tenant_code)


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: str,
    user: AuthUser = Depends(require_permission("tenants", "view")),
    service: TenantService = Depends(get_tenant_service)
):
    return service.get_tenant(tenant_id)


@router.put("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.update_tenant(ctx, tenant_id, payload))


@router.patch("/{tenant_id}/status")
async def toggle_tenant_status(
    tenant_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.toggle_status(ctx, tenant_id, toggle.value if toggle else None))


@router.patch("/{tenant_id}/featured")
async def toggle_tenant_featured(
    tenant_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    return respond(service.toggle_featured(ctx, tenant_id, toggle.value if toggle else None))


@router.delete("/{tenant_id}")
async def delete_tenant(
    tenant_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: TenantService = Depends(get_tenant_service)
):
    """Delete a tenant; refused while it still has promotions"""
    return respond(service.delete_tenant(ctx, tenant_id))
