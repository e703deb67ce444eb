import logging
import secrets
import string
from dataclasses import replace
from typing import Any, Dict, List, Optional

from mall_admin.core import crud
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, guarded, validate_payload
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.listing import Page, group_by
from mall_admin.core.results import ActionResult
from mall_admin.core.security import hash_password
from mall_admin.database.supabase_client import first_row
from mall_admin.modules.users.schemas import (
    AdminUserResponse, ResetPasswordRequest, UserCreate, UserListParams, UserRole, UserUpdate,
)

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, full_name, avatar_url, is_active, last_login_at, created_at, updated_at"


def _filter_users(query, params: UserListParams):
    if params.status == "active":
        query = query.eq("is_active", True)
    elif params.status == "inactive":
        query = query.eq("is_active", False)
    if params._user_ids is not None:
        query = query.in_("id", params._user_ids)
    return query


USER = EntityDescriptor(
    name="User",
    table="admin_users",
    module="admin_users",
    activity_module="users",
    resource_type="admin_user",
    row_model=AdminUserResponse,
    label_field="full_name",
    unique_messages={"email": "A user with this email already exists"},
    revalidate_paths=lambda row: ["/users", f"/users/{row.get('id')}"],
    search_columns=("full_name", "email"),
    sortable=("created_at", "full_name", "email", "last_login_at"),
    apply_filters=_filter_users,
    select=USER_COLUMNS,
)


def generate_temp_password(length: int = 12) -> str:
    """Random password that satisfies the password rule (upper, lower, digit)."""
    alphabet = string.ascii_letters + string.digits
    while True:
        password = "".join(secrets.choice(alphabet) for _ in range(length))
        if any(c.islower() for c in password) and any(c.isupper() for c in password) and any(c.isdigit() for c in password):
            return password


class UserService:
    def __init__(self, backends: Backends):
        # Account tables are only readable with the elevated client.
        self.writer = backends.writer
        self.users = CrudEngine(USER, replace(backends, reader=backends.writer))

    def attach_roles(self, users: List[AdminUserResponse]) -> List[AdminUserResponse]:
        """Fill each user's roles with two batched queries."""
        ids = [user.id for user in users]
        if not ids:
            return users
        assignments = self.users.execute(
            self.writer.table("admin_user_roles").select("user_id, role_id").in_("user_id", ids)
        ).data or []
        role_ids = list({a["role_id"] for a in assignments})
        roles: Dict[str, UserRole] = {}
        if role_ids:
            rows = self.users.execute(
                self.writer.table("admin_roles").select("id, name, display_name, color").in_("id", role_ids)
            ).data or []
            roles = {row["id"]: UserRole.model_validate(row) for row in rows}
        by_user = group_by(assignments, "user_id")
        for user in users:
            user.roles = [roles[a["role_id"]] for a in by_user.get(user.id, []) if a["role_id"] in roles]
        return users

    def list_users(self, params: UserListParams) -> Page:
        if params.role_id:
            members = self.users.execute(
                self.writer.table("admin_user_roles").select("user_id").eq("role_id", params.role_id)
            ).data or []
            params._user_ids = list({m["user_id"] for m in members})
        page = self.users.list(params)
        self.attach_roles(page.data)
        return page

    def get_user(self, user_id: str) -> AdminUserResponse:
        user = self.users.get(user_id)
        self.attach_roles([user])
        return user

    def check_roles(self, role_ids: List[str]) -> None:
        if not role_ids:
            return
        found = self.users.execute(
            self.writer.table("admin_roles").select("id").in_("id", list(set(role_ids)))
        ).data or []
        if len(found) != len(set(role_ids)):
            raise ActionError("Invalid role ID", ErrorCode.VALIDATION_FAILED)

    def replace_roles(self, ctx: RequestContext, user_id: str, role_ids: List[str]) -> None:
        self.users.execute(self.writer.table("admin_user_roles").delete().eq("user_id", user_id))
        if role_ids:
            self.users.execute(self.writer.table("admin_user_roles").insert([
                {"user_id": user_id, "role_id": role_id, "assigned_by": ctx.user_id} for role_id in role_ids
            ]))

    @guarded
    def create_user(self, ctx: RequestContext, payload: Any) -> ActionResult:
        self.users.authorize(ctx, "create")
        data = validate_payload(UserCreate, payload)
        role_ids = data.pop("role_ids")
        password = data.pop("password", None)
        temporary = password is None
        if temporary:
            password = generate_temp_password()
        self.check_roles(role_ids)
        data["password_hash"] = hash_password(password)

        row = first_row(self.users.execute(self.writer.table("admin_users").insert(data)))
        if row is None:
            raise ActionError("Failed to create user")
        try:
            self.replace_roles(ctx, row["id"], role_ids)
        except ActionError:
            # No account is left behind without its roles.
            self.users.execute(self.writer.table("admin_users").delete().eq("id", row["id"]))
            raise
        logger.info(f"Admin user {row.get('email')} created by {ctx.user_id}")

        user = self.users.to_model(row)
        self.attach_roles([user])
        self.users.record(ctx, "create", row, new_values={k: v for k, v in data.items() if k != "password_hash"})
        self.users.revalidate(row)
        message = f"User created. Temporary password: {password}" if temporary else "User created successfully"
        return ActionResult.ok(user, message)

    @guarded
    def update_user(self, ctx: RequestContext, user_id: str, payload: Any) -> ActionResult:
        self.users.authorize(ctx, "edit")
        data = validate_payload(UserUpdate, payload, partial=True)
        role_ids: Optional[List[str]] = data.pop("role_ids", None)
        if role_ids is not None:
            self.users.authorize(ctx, "manage_roles")
            self.check_roles(role_ids)
        data = {k: v for k, v in data.items() if v is not None or k == "avatar_url"}
        if data.get("is_active") is False and user_id == ctx.user_id:
            raise ActionError("You cannot deactivate your own account", ErrorCode.VALIDATION_FAILED)

        result = self.users.set_fields(ctx, user_id, data, message="User updated successfully")
        if not result.success:
            return result
        if role_ids is not None:
            self.replace_roles(ctx, user_id, role_ids)
        self.attach_roles([result.data])
        return result

    @guarded
    def set_status(self, ctx: RequestContext, user_id: str, is_active: Optional[bool] = None) -> ActionResult:
        """Activate or deactivate an account; accounts are never hard-deleted."""
        self.users.authorize(ctx, "edit")
        if is_active is None:
            current = self.users.fetch(user_id, client=self.writer)
            is_active = not current.get("is_active", False)
        if not is_active and user_id == ctx.user_id:
            raise ActionError("You cannot deactivate your own account", ErrorCode.VALIDATION_FAILED)
        return self.users.toggle(ctx, user_id, "is_active", is_active)

    @guarded
    def reset_password(self, ctx: RequestContext, user_id: str, payload: Any) -> ActionResult:
        self.users.authorize(ctx, "edit")
        data = validate_payload(ResetPasswordRequest, payload)
        current = self.users.fetch(user_id, client=self.writer)
        self.users.execute(
            self.writer.table("admin_users")
            .update({"password_hash": hash_password(data["new_password"]), "updated_at": crud.utcnow().isoformat()})
            .eq("id", user_id)
        )
        self.users.record(ctx, "reset_password", current)
        return ActionResult.ok(None, "Password reset successfully")
