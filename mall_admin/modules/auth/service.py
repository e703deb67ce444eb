import logging
from dataclasses import replace
from typing import Any, Optional

from mall_admin.core import crud
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, guarded, validate_payload
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.permissions import (
    AuthUser,
    check_route_permission,
    get_accessible_modules,
    get_highest_role,
    is_super_admin,
)
from mall_admin.core.results import ActionResult
from mall_admin.core.security import hash_password, verify_password
from mall_admin.database.supabase_client import first_row
from mall_admin.modules.auth.schemas import LoginRequest, LoginResponse, MeResponse, RouteAccessResponse
from mall_admin.modules.users.schemas import ChangePasswordRequest, ProfileUpdate, UserRole
from mall_admin.modules.users.service import USER

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
DEACTIVATED = "Your account has been deactivated. Please contact an administrator."


class AuthService:
    def __init__(self, backends: Backends):
        self.supabase = backends.writer
        self.users = CrudEngine(USER, replace(backends, reader=backends.writer))

    def require_user(self, ctx: RequestContext) -> AuthUser:
        if ctx is None or ctx.user is None:
            raise ActionError.of(ErrorCode.UNAUTHORIZED)
        return ctx.user

    @guarded
    def login(self, ctx: RequestContext, payload: Any) -> ActionResult:
        """
        Check credentials against admin_users. The caller issues the session cookie
        from the returned LoginResponse when the result is successful.
        """
        credentials = validate_payload(LoginRequest, payload)
        row = first_row(self.users.execute(
            self.supabase.table("admin_users")
            .select("id, email, password_hash, full_name, is_active")
            .eq("email", credentials["email"])
            .limit(1)
        ))
        if row is None:
            raise ActionError(INVALID_CREDENTIALS, ErrorCode.UNAUTHORIZED)
        if not row.get("is_active"):
            raise ActionError(DEACTIVATED, ErrorCode.FORBIDDEN)
        if not verify_password(credentials["password"], row.get("password_hash") or ""):
            raise ActionError(INVALID_CREDENTIALS, ErrorCode.UNAUTHORIZED)

        try:
            self.supabase.table("admin_users")\
                .update({"last_login_at": crud.utcnow().isoformat()})\
                .eq("id", row["id"])\
                .execute()
        except Exception as e:
            logger.warning(f"Failed to stamp last login for {row['id']}: {e}")

        self.users.activity.log(
            ctx,
            action="login",
            module="auth",
            resource_type="admin_user",
            resource_id=row["id"],
            resource_name=row.get("full_name"),
            user_id=row["id"],
        )
        logger.info(f"Admin {row['email']} logged in")
        return ActionResult.ok(
            LoginResponse(user_id=row["id"], email=row["email"], full_name=row.get("full_name")),
            "Login successful",
        )

    def logout(self, ctx: RequestContext) -> ActionResult:
        if ctx.user is not None:
            self.users.activity.log(
                ctx,
                action="logout",
                module="auth",
                resource_type="admin_user",
                resource_id=ctx.user.id,
                resource_name=ctx.user.full_name,
            )
        return ActionResult.ok(None, "Logged out successfully")

    def me(self, user: AuthUser) -> MeResponse:
        return MeResponse(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            is_active=user.is_active,
            roles=[UserRole.model_validate(role.model_dump()) for role in user.roles],
            permissions=sorted(user.permissions),
            accessible_modules=get_accessible_modules(user),
            highest_role=get_highest_role(user),
            is_super_admin=is_super_admin(user),
        )

    def route_access(self, user: Optional[AuthUser], path: str) -> RouteAccessResponse:
        return RouteAccessResponse(path=path, allowed=check_route_permission(user, path))

    @guarded
    def change_password(self, ctx: RequestContext, payload: Any) -> ActionResult:
        user = self.require_user(ctx)
        data = validate_payload(ChangePasswordRequest, payload)
        row = first_row(self.users.execute(
            self.supabase.table("admin_users").select("id, full_name, password_hash").eq("id", user.id).limit(1)
        ))
        if row is None:
            raise ActionError("User not found", ErrorCode.NOT_FOUND)
        if not verify_password(data["current_password"], row.get("password_hash") or ""):
            raise ActionError("Current password is incorrect", ErrorCode.VALIDATION_FAILED)

        self.users.execute(
            self.supabase.table("admin_users")
            .update({"password_hash": hash_password(data["new_password"]), "updated_at": crud.utcnow().isoformat()})
            .eq("id", user.id)
        )
        self.users.record(ctx, "change_password", row)
        return ActionResult.ok(None, "Password changed successfully")

    @guarded
    def update_profile(self, ctx: RequestContext, payload: Any) -> ActionResult:
        """Change your own display name and avatar; no admin_users permission is needed."""
        user = self.require_user(ctx)
        data = validate_payload(ProfileUpdate, payload)
        current = self.users.fetch(user.id)
        data["updated_at"] = crud.utcnow().isoformat()
        row = first_row(self.users.execute(self.supabase.table("admin_users").update(data).eq("id", user.id)))
        if row is None:
            raise ActionError("User not found", ErrorCode.NOT_FOUND)
        changed = {k: v for k, v in data.items() if k != "updated_at"}
        self.users.record(
            ctx, "update", row, old_values={k: current.get(k) for k in changed}, new_values=changed,
        )
        self.users.revalidate(row)
        return ActionResult.ok(self.users.to_model(row), "Profile updated successfully")
