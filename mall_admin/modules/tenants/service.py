from typing import Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, ReferentialGuard
from mall_admin.core.listing import Page, RelatedJoin
from mall_admin.core.results import ActionResult
from mall_admin.modules.tenants.schemas import (
    TenantCategoryCreate, TenantCategoryResponse, TenantCategoryUpdate,
    TenantCreate, TenantListParams, TenantResponse, TenantUpdate,
)


def _filter_tenants(query, params: TenantListParams):
    category_id = params.category_id or params.category
    if category_id:
        query = query.eq("category_id", category_id)
    if params.floor:
        query = query.eq("main_floor", params.floor)
    if params.status == "active":
        query = query.eq("is_active", True)
    elif params.status == "inactive":
        query = query.eq("is_active", False)
    if params.featured is not None:
        query = query.eq("is_featured", params.featured)
    if params.new_tenant is not None:
        query = query.eq("is_new_tenant", params.new_tenant)
    return query


def _category_defaults(data: Dict[str, Any], current, now) -> Dict[str, Any]:
    if current is None:
        data["icon"] = data.get("icon") or "store"
        data["color"] = data.get("color") or "#6b7280"
    return data


TENANT = EntityDescriptor(
    name="Tenant",
    table="tenants",
    module="tenants",
    activity_module="tenants",
    resource_type="tenant",
    row_model=TenantResponse,
    create_schema=TenantCreate,
    update_schema=TenantUpdate,
    unique_messages={"tenant_code": "A tenant with this code already exists"},
    delete_guards=[
        ReferentialGuard(
            "promotions", "tenant_id",
            "Cannot delete tenant with {count} promotion(s). Delete promotions first.",
        ),
    ],
    revalidate_paths=lambda row: ["/", "/tenants", f"/tenants/{row['id']}"],
    search_columns=("name", "tenant_code"),
    sortable=("name", "tenant_code", "main_floor", "created_at", "updated_at"),
    default_sort="name",
    default_desc=False,
    apply_filters=_filter_tenants,
    joins=(RelatedJoin("category_id", "tenant_categories", "category", "id, name, display_name, icon, color"),),
)

TENANT_CATEGORY = EntityDescriptor(
    name="Category",
    table="tenant_categories",
    module="tenant_categories",
    activity_module="tenants",
    resource_type="tenant_category",
    row_model=TenantCategoryResponse,
    create_schema=TenantCategoryCreate,
    update_schema=TenantCategoryUpdate,
    label_field="display_name",
    unique_messages={"name": "A category with this name already exists"},
    delete_guards=[
        ReferentialGuard(
            "tenants", "category_id",
            "Cannot delete category with {count} tenant(s). Move tenants first.",
        ),
    ],
    derive=_category_defaults,
    revalidate_paths=lambda row: ["/tenants"],
    default_sort="sort_order",
    default_desc=False,
)


class TenantService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.tenants = CrudEngine(TENANT, backends)
        self.categories = CrudEngine(TENANT_CATEGORY, backends)

    # Tenants

    def list_tenants(self, params: TenantListParams) -> Page:
        return self.tenants.list(params)

    def get_tenant(self, tenant_id: str) -> TenantResponse:
        return self.tenants.get(tenant_id)

    def get_tenant_by_code(self, tenant_code: str) -> TenantResponse:
        return self.tenants.get_by("tenant_code", tenant_code.strip().upper())

    def create_tenant(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.tenants.create(ctx, payload)

    def update_tenant(self, ctx: RequestContext, tenant_id: str, payload: Any) -> ActionResult:
        return self.tenants.update(ctx, tenant_id, payload)

    def delete_tenant(self, ctx: RequestContext, tenant_id: str) -> ActionResult:
        return self.tenants.delete(ctx, tenant_id)

    def toggle_status(self, ctx: RequestContext, tenant_id: str, is_active: Optional[bool] = None) -> ActionResult:
        return self.tenants.toggle(ctx, tenant_id, "is_active", is_active)

    def toggle_featured(self, ctx: RequestContext, tenant_id: str, is_featured: Optional[bool] = None) -> ActionResult:
        return self.tenants.toggle(
            ctx, tenant_id, "is_featured", is_featured,
            action="feature", on="feature", off="unfeature",
            on_message="featured", off_message="unfeatured",
        )

    def list_floors(self) -> List[str]:
        result = self.tenants.execute(self.supabase.table("tenants").select("main_floor"))
        return sorted({row["main_floor"] for row in result.data or [] if row.get("main_floor")})

    # Categories

    def list_categories(self, active_only: bool = False) -> List[TenantCategoryResponse]:
        categories = self.categories.all(
            order_by="sort_order",
            filters={"is_active": True} if active_only else None,
        )
        usage = self.tenants.execute(self.supabase.table("tenants").select("category_id")).data or []
        counts: Dict[str, int] = {}
        for row in usage:
            if row.get("category_id"):
                counts[row["category_id"]] = counts.get(row["category_id"], 0) + 1
        for category in categories:
            category.tenant_count = counts.get(category.id, 0)
        return categories

    def get_category(self, category_id: str) -> TenantCategoryResponse:
        return self.categories.get(category_id)

    def create_category(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.categories.create(ctx, payload)

    def update_category(self, ctx: RequestContext, category_id: str, payload: Any) -> ActionResult:
        return self.categories.update(ctx, category_id, payload)

    def delete_category(self, ctx: RequestContext, category_id: str) -> ActionResult:
        return self.categories.delete(ctx, category_id)

    def toggle_category_status(self, ctx: RequestContext, category_id: str, is_active: Optional[bool] = None) -> ActionResult:
        return self.categories.toggle(ctx, category_id, "is_active", is_active)
