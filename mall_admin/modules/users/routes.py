from fastapi import APIRouter, Body, Depends, Query
from typing import Annotated, Any, Dict, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.users.schemas import AdminUserResponse, UserListParams
from mall_admin.modules.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(backends: Backends = Depends(get_backends)) -> UserService:
    return UserService(backends)


@router.get("", response_model=Page[AdminUserResponse])
async def list_users(
    params: Annotated[UserListParams, Query()],
    user: AuthUser = Depends(require_permission("admin_users", "view")),
    service: UserService = Depends(get_user_service)
):
    """List admin accounts with their roles. Filter by status (active/inactive) or roleId."""
    return service.list_users(params)


@router.post("", status_code=201)
async def create_user(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    """Create an admin account. Without a password a temporary one is generated and returned in the message."""
    return respond(service.create_user(ctx, payload), 201)


@router.get("/{user_id}", response_model=AdminUserResponse)
async def get_user(
    user_id: str,
    user: AuthUser = Depends(require_permission("admin_users", "view")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user(user_id)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    """Update an account; when role_ids is present the user's roles are replaced"""
    return respond(service.update_user(ctx, user_id, payload))


@router.patch("/{user_id}/status")
async def set_user_status(
    user_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    return respond(service.set_status(ctx, user_id, toggle.value if toggle else None))


@router.post("/{user_id}/reset-password")
async def reset_password(
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: UserService = Depends(get_user_service)
):
    return respond(service.reset_password(ctx, user_id, payload))
