from fastapi import APIRouter, Body, Depends, Query, Request
from typing import Any, Dict, Optional

from mall_admin.config.settings import settings
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_current_user, get_request_context, get_session, require_user
from mall_admin.core.limiter import limiter
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.session import SessionData, clear_session_cookie, create_session, set_session_cookie
from mall_admin.modules.auth.schemas import MeResponse, RouteAccessResponse
from mall_admin.modules.auth.service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(backends: Backends = Depends(get_backends)) -> AuthService:
    return AuthService(backends)


@router.post("/login")
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    """Check email and password and set the signed session cookie"""
    result = service.login(ctx, payload)
    response = respond(result)
    if result.success:
        login_data = result.data
        set_session_cookie(response, create_session(login_data.user_id, login_data.email, login_data.full_name))
    return response


@router.post("/logout")
async def logout(
    ctx: RequestContext = Depends(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    """Log the logout and clear the session cookie"""
    response = respond(service.logout(ctx))
    clear_session_cookie(response)
    return response


@router.get("/session", response_model=Optional[SessionData], response_model_by_alias=True)
async def current_session(session: Optional[SessionData] = Depends(get_session)):
    """The decoded session cookie, or null when missing, tampered with or expired"""
    return session


@router.get("/me", response_model=MeResponse)
async def me(
    user: AuthUser = Depends(require_user),
    service: AuthService = Depends(get_auth_service)
):
    """Current admin with roles, permissions and accessible modules (for the dashboard UI)"""
    return service.me(user)


@router.get("/access", response_model=RouteAccessResponse)
async def route_access(
    path: str = Query(..., min_length=1),
    user: Optional[AuthUser] = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Whether the current admin may open a dashboard route"""
    return service.route_access(user, path)


@router.post("/change-password")
async def change_password(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    return respond(service.change_password(ctx, payload))


@router.put("/profile")
async def update_profile(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: AuthService = Depends(get_auth_service)
):
    return respond(service.update_profile(ctx, payload))
