"""
Role-based permission resolver.

An identity's permission set is the union of the permissions granted to its
active roles. The super admin role short-circuits every check. Loading is fail
closed: a storage error while resolving roles or permissions yields an empty
set rather than an error.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, Field
from supabase import Client

from mall_admin.config.permissions_config import (
    MODULES,
    ROLE_HIERARCHY,
    ROUTE_PERMISSIONS,
    SUPER_ADMIN_ROLE,
    permission_name,
)
from mall_admin.database.supabase_client import first_row

logger = logging.getLogger(__name__)

PermissionCheck = Tuple[str, str]

_UUID_SEGMENT = re.compile(r"/[a-f0-9-]{36}")
_NUMERIC_SEGMENT = re.compile(r"/\d+")


class RoleSummary(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    color: Optional[str] = None


class AuthUser(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    roles: List[RoleSummary] = Field(default_factory=list)
    permissions: Set[str] = Field(default_factory=set)


def has_role(user: Optional[AuthUser], role_name: str) -> bool:
    if user is None:
        return False
    return any(role.name == role_name for role in user.roles)


def is_super_admin(user: Optional[AuthUser]) -> bool:
    return has_role(user, SUPER_ADMIN_ROLE)


def has_permission(user: Optional[AuthUser], module: str, action: str) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return permission_name(module, action) in user.permissions


def has_any_permission(user: Optional[AuthUser], checks: Iterable[PermissionCheck]) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return any(has_permission(user, module, action) for module, action in checks)


def has_all_permissions(user: Optional[AuthUser], checks: Iterable[PermissionCheck]) -> bool:
    if user is None:
        return False
    if is_super_admin(user):
        return True
    return all(has_permission(user, module, action) for module, action in checks)


def get_highest_role(user: Optional[AuthUser]) -> Optional[str]:
    if user is None or not user.roles:
        return None
    for role_name in ROLE_HIERARCHY:
        if has_role(user, role_name):
            return role_name
    return user.roles[0].name


def get_accessible_modules(user: Optional[AuthUser]) -> List[str]:
    if user is None:
        return []
    if is_super_admin(user):
        return list(MODULES)
    modules = {name.split(".", 1)[0] for name in user.permissions}
    return [module for module in MODULES if module in modules]


def normalize_route(path: str) -> str:
    path = _UUID_SEGMENT.sub("/[id]", path)
    path = _NUMERIC_SEGMENT.sub("/[id]", path)
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def check_route_permission(user: Optional[AuthUser], path: str) -> bool:
    """Whether the user may open a dashboard route. Routes without an entry are open to any identity."""
    if user is None:
        return False
    if is_super_admin(user):
        return True
    required = ROUTE_PERMISSIONS.get(normalize_route(path))
    if required is None:
        return True
    return has_permission(user, *required)


def get_user_roles(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[RoleSummary]:
    """Active roles assigned to the user. Uses request-scoped cache when provided."""
    if cache is not None and "roles" in cache:
        return cache["roles"]
    try:
        assignments = supabase.table("admin_user_roles")\
            .select("role_id")\
            .eq("user_id", user_id)\
            .execute()
        role_ids = list({a["role_id"] for a in assignments.data or []})
        roles = []
        if role_ids:
            result = supabase.table("admin_roles")\
                .select("id, name, display_name, color")\
                .in_("id", role_ids)\
                .eq("is_active", True)\
                .execute()
            roles = [RoleSummary(**row) for row in result.data or []]
    except Exception as e:
        logger.error(f"Error getting user roles: {e}")
        roles = []
    if cache is not None:
        cache["roles"] = roles
    return roles


def get_user_permissions(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Set[str]:
    """Deduplicated permission names granted through the user's roles. Populates request-scoped cache."""
    if cache is not None and "permission_names" in cache:
        return cache["permission_names"]
    try:
        roles = get_user_roles(user_id, supabase, cache)
        names: Set[str] = set()
        if roles:
            grants = supabase.table("admin_role_permissions")\
                .select("permission_id")\
                .in_("role_id", [role.id for role in roles])\
                .execute()
            permission_ids = list({g["permission_id"] for g in grants.data or []})
            if permission_ids:
                result = supabase.table("admin_permissions")\
                    .select("name")\
                    .in_("id", permission_ids)\
                    .eq("is_active", True)\
                    .execute()
                names = {row["name"] for row in result.data or [] if row.get("name")}
    except Exception as e:
        logger.error(f"Error getting user permissions: {e}")
        names = set()
    if cache is not None:
        cache["permission_names"] = names
    return names


def load_auth_user(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[AuthUser]:
    """Resolve an identity with roles and permissions. Missing or deactivated accounts resolve to None."""
    try:
        row = first_row(
            supabase.table("admin_users")
            .select("id, email, full_name, avatar_url, is_active")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error loading admin user {user_id}: {e}")
        return None
    if row is None or not row.get("is_active", False):
        return None

    return AuthUser(
        id=row["id"],
        email=row["email"],
        full_name=row.get("full_name"),
        avatar_url=row.get("avatar_url"),
        is_active=True,
        roles=get_user_roles(user_id, supabase, cache),
        permissions=get_user_permissions(user_id, supabase, cache),
    )
