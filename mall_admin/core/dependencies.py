"""
Core dependencies for route protection and permission checking
"""

from fastapi import BackgroundTasks, Depends, Request
from supabase import Client
from typing import Any, Dict, Optional
import logging

from mall_admin.config.settings import settings
from mall_admin.core.activity import ActivityLogger
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.permissions import AuthUser, has_permission, load_auth_user
from mall_admin.core.revalidation import Revalidator, get_revalidator
from mall_admin.core.session import SessionData, read_session
from mall_admin.database.supabase_client import get_service_supabase, get_supabase

logger = logging.getLogger(__name__)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (session, user, roles, permission_names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_activity_logger(supabase: Client = Depends(get_service_supabase)) -> ActivityLogger:
    return ActivityLogger(supabase)


def get_backends(
    reader: Client = Depends(get_supabase),
    writer: Client = Depends(get_service_supabase),
    activity: ActivityLogger = Depends(get_activity_logger),
    revalidator: Revalidator = Depends(get_revalidator),
) -> Backends:
    return Backends(reader=reader, writer=writer, activity=activity, revalidator=revalidator)


def get_session(request: Request) -> Optional[SessionData]:
    """Valid session from the cookie, or None when missing, tampered or expired"""
    cache = _get_request_cache(request)
    if "session" not in cache:
        cache["session"] = read_session(request.cookies.get(settings.session_cookie_name))
    return cache["session"]


def get_current_user(
    request: Request,
    session: Optional[SessionData] = Depends(get_session),
    supabase: Client = Depends(get_service_supabase),
) -> Optional[AuthUser]:
    """Resolve the session's identity with roles and permissions"""
    if session is None:
        return None
    cache = _get_request_cache(request)
    if "user" not in cache:
        cache["user"] = load_auth_user(session.user_id, supabase, cache)
    return cache["user"]


def get_client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or (request.client.host if request.client else None)


def get_request_context(
    request: Request,
    background_tasks: BackgroundTasks,
    user: Optional[AuthUser] = Depends(get_current_user),
) -> RequestContext:
    return RequestContext(
        user=user,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        background_tasks=background_tasks,
    )


def require_user(user: Optional[AuthUser] = Depends(get_current_user)) -> AuthUser:
    if user is None:
        raise ActionError.of(ErrorCode.UNAUTHORIZED)
    return user


def require_permission(module: str, action: str):
    """Factory function to create permission check dependency"""
    def check_permission(user: AuthUser = Depends(require_user)) -> AuthUser:
        """Dependency to check if user has required permission"""
        if not has_permission(user, module, action):
            raise ActionError(
                f"Insufficient permissions. Required: {module}.{action}",
                ErrorCode.FORBIDDEN,
            )
        return user
    return check_permission
