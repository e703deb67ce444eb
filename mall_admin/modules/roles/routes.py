from fastapi import APIRouter, Body, Depends
from typing import Any, Dict, List

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.modules.roles.schemas import (
    PermissionGroup, PermissionResponse, RoleResponse, RoleWithPermissionsResponse,
)
from mall_admin.modules.roles.service import RoleService

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(backends: Backends = Depends(get_backends)) -> RoleService:
    return RoleService(backends)


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    """List all roles with user and permission counts"""
    return service.list_roles()


@router.post("", status_code=201)
async def create_role(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: RoleService = Depends(get_role_service)
):
    """Create a role and grant it the permissions listed in permission_ids"""
    return respond(service.create_role(ctx, payload), 201)


@router.get("/permissions", response_model=List[PermissionResponse])
async def list_permissions(
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    return service.list_permissions()


@router.get("/permissions/grouped", response_model=List[PermissionGroup])
async def permissions_by_module(
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    """Active permissions grouped by module, for the role editor"""
    return service.permissions_by_module()


@router.get("/{role_id}", response_model=RoleWithPermissionsResponse)
async def get_role(
    role_id: str,
    user: AuthUser = Depends(require_permission("admin_roles", "view")),
    service: RoleService = Depends(get_role_service)
):
    return service.get_role(role_id)


@router.put("/{role_id}")
async def update_role(
    role_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: RoleService = Depends(get_role_service)
):
    """Update a role; when permission_ids is present the role's permission set is replaced"""
    return respond(service.update_role(ctx, role_id, payload))


@router.delete("/{role_id}")
async def delete_role(
    role_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: RoleService = Depends(get_role_service)
):
    return respond(service.delete_role(ctx, role_id))
