from dataclasses import replace
from typing import Any, Dict, List, Optional

from mall_admin.config.permissions_config import MODULES, SUPER_ADMIN_ROLE
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, ReferentialGuard, guarded, validate_payload
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.listing import group_by
from mall_admin.core.results import ActionResult
from mall_admin.database.supabase_client import first_row
from mall_admin.modules.roles.schemas import (
    PermissionGroup, PermissionResponse, RoleCreate, RoleResponse, RoleUpdate, RoleWithPermissionsResponse,
)

ROLE = EntityDescriptor(
    name="Role",
    table="admin_roles",
    module="admin_roles",
    activity_module="users",
    resource_type="admin_role",
    row_model=RoleResponse,
    create_schema=RoleCreate,
    update_schema=RoleUpdate,
    label_field="display_name",
    unique_messages={"name": "A role with this name already exists"},
    delete_guards=[
        ReferentialGuard("admin_user_roles", "role_id", "Cannot delete role that is assigned to {count} user(s)"),
    ],
    revalidate_paths=lambda row: ["/users", "/users/roles"],
    default_sort="sort_order",
    default_desc=False,
)


class RoleService:
    def __init__(self, backends: Backends):
        # Role tables are only readable with the elevated client.
        self.supabase = backends.writer
        self.roles = CrudEngine(ROLE, replace(backends, reader=backends.writer))

    def _rows(self, query) -> List[Dict[str, Any]]:
        return self.roles.execute(query).data or []

    def _counts(self, table: str, role_ids: List[str]) -> Dict[str, int]:
        if not role_ids:
            return {}
        rows = self._rows(self.supabase.table(table).select("role_id").in_("role_id", role_ids))
        return {role_id: len(items) for role_id, items in group_by(rows, "role_id").items()}

    def list_roles(self) -> List[RoleResponse]:
        """All roles by sort_order, each with the number of users holding it and permissions granted to it."""
        roles = self.roles.all(order_by="sort_order")
        ids = [role.id for role in roles]
        users = self._counts("admin_user_roles", ids)
        permissions = self._counts("admin_role_permissions", ids)
        for role in roles:
            role.user_count = users.get(role.id, 0)
            role.permission_count = permissions.get(role.id, 0)
        return roles

    def role_permissions(self, role_id: str) -> List[PermissionResponse]:
        grants = self._rows(self.supabase.table("admin_role_permissions").select("permission_id").eq("role_id", role_id))
        permission_ids = list({g["permission_id"] for g in grants})
        if not permission_ids:
            return []
        rows = self._rows(
            self.supabase.table("admin_permissions").select("*").in_("id", permission_ids).order("module").order("action")
        )
        return [PermissionResponse.model_validate(row) for row in rows]

    def get_role(self, role_id: str) -> RoleWithPermissionsResponse:
        role = self.roles.get(role_id)
        permissions = self.role_permissions(role_id)
        return RoleWithPermissionsResponse(
            **role.model_dump(exclude={"permission_count", "user_count"}),
            permissions=permissions,
            permission_count=len(permissions),
            user_count=self._counts("admin_user_roles", [role_id]).get(role_id, 0),
        )

    def list_permissions(self) -> List[PermissionResponse]:
        rows = self._rows(
            self.supabase.table("admin_permissions").select("*").eq("is_active", True).order("module").order("action")
        )
        return [PermissionResponse.model_validate(row) for row in rows]

    def permissions_by_module(self) -> List[PermissionGroup]:
        """Active permissions grouped per module, modules in catalog order, unknown modules last."""
        grouped = group_by([p.model_dump() for p in self.list_permissions()], "module")
        order = list(MODULES) + sorted(m for m in grouped if m not in MODULES)
        return [
            PermissionGroup(
                module=module,
                description=MODULES.get(module, {}).get("description"),
                permissions=[PermissionResponse.model_validate(p) for p in grouped[module]],
            )
            for module in order
            if module in grouped
        ]

    def replace_permissions(self, role_id: str, permission_ids: List[str]) -> None:
        self.roles.execute(self.supabase.table("admin_role_permissions").delete().eq("role_id", role_id))
        if permission_ids:
            self.roles.execute(self.supabase.table("admin_role_permissions").insert([
                {"role_id": role_id, "permission_id": permission_id} for permission_id in permission_ids
            ]))

    def _next_sort_order(self) -> int:
        row = first_row(self.roles.execute(
            self.supabase.table("admin_roles").select("sort_order").order("sort_order", desc=True).limit(1)
        ))
        return ((row or {}).get("sort_order") or 0) + 1

    @guarded
    def create_role(self, ctx: RequestContext, payload: Any) -> ActionResult:
        self.roles.authorize(ctx, "create")
        data = validate_payload(RoleCreate, payload)
        permission_ids = data.pop("permission_ids")
        data["sort_order"] = self._next_sort_order()
        row = first_row(self.roles.execute(self.supabase.table("admin_roles").insert(data)))
        if row is None:
            raise ActionError("Failed to create role")
        self.replace_permissions(row["id"], permission_ids)
        self.roles.record(ctx, "create", row, new_values={**data, "permission_ids": permission_ids})
        self.roles.revalidate(row)
        role = self.roles.to_model(row)
        role.permission_count = len(permission_ids)
        return ActionResult.ok(role, "Role created successfully")

    @guarded
    def update_role(self, ctx: RequestContext, role_id: str, payload: Any) -> ActionResult:
        self.roles.authorize(ctx, "edit")
        data = validate_payload(RoleUpdate, payload, partial=True)
        permission_ids: Optional[List[str]] = data.pop("permission_ids", None)
        data = {k: v for k, v in data.items() if v is not None or k == "description"}
        current = self.roles.fetch(role_id, client=self.supabase)
        if current.get("name") == SUPER_ADMIN_ROLE and data.get("name", SUPER_ADMIN_ROLE) != SUPER_ADMIN_ROLE:
            raise ActionError("The super admin role cannot be renamed", ErrorCode.VALIDATION_FAILED)

        result = self.roles.set_fields(ctx, role_id, data, message="Role updated successfully")
        if not result.success:
            return result
        if permission_ids is not None:
            self.replace_permissions(role_id, permission_ids)
        return result

    @guarded
    def delete_role(self, ctx: RequestContext, role_id: str) -> ActionResult:
        self.roles.authorize(ctx, "delete")
        current = self.roles.fetch(role_id, client=self.supabase)
        if current.get("name") == SUPER_ADMIN_ROLE:
            raise ActionError("The super admin role cannot be deleted", ErrorCode.FORBIDDEN)
        self.roles.check_guards(role_id)
        self.roles.execute(self.supabase.table("admin_role_permissions").delete().eq("role_id", role_id))
        return self.roles.delete(ctx, role_id)
