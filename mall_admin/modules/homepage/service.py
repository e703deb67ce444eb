from typing import Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.listing import RelatedJoin
from mall_admin.core.results import ActionResult
from mall_admin.modules.homepage.feed import CONTENT_TABLES, resolve_items, to_reference_data
from mall_admin.modules.homepage.schemas import (
    FeaturedRestaurantCreate, FeaturedRestaurantResponse, FeaturedRestaurantUpdate,
    ReferenceOption, ResolvedWhatsOn, RestaurantTenant,
    WhatsOnCreate, WhatsOnResponse, WhatsOnUpdate,
)

REFERENCE_RULE = "Custom items require a title, other types require a reference"

# content_type -> (filter column, filter value, order column, descending, limit)
REFERENCE_QUERIES = {
    "event": ("is_published", True, "start_at", True, 50),
    "tenant": ("is_active", True, "name", False, 100),
    "post": ("is_published", True, "published_at", True, 50),
    "promotion": ("status", "published", "start_date", True, 50),
}

RESTAURANT_CATEGORY_FILTER = "name.ilike.%food%,name.ilike.%restaurant%,name.ilike.%cafe%,name.ilike.%dining%"


def require_reference_or_title(data: Dict[str, Any], current: Optional[Dict[str, Any]], now) -> Dict[str, Any]:
    """Custom items need a title of at least two characters; every other type needs a reference."""
    merged = {**(current or {}), **data}
    if merged.get("content_type") == "custom":
        valid = len((merged.get("custom_title") or "").strip()) >= 2
    else:
        valid = bool(merged.get("reference_id"))
    if not valid:
        raise ActionError(REFERENCE_RULE, ErrorCode.VALIDATION_FAILED)
    return data


def _homepage_paths(row: Dict[str, Any]) -> List[str]:
    return ["/", "/homepage", "/homepage/whats-on"]


WHATS_ON = EntityDescriptor(
    name="What's On item",
    table="whats_on",
    module="whats_on",
    activity_module="homepage",
    resource_type="whats_on",
    row_model=WhatsOnResponse,
    create_schema=WhatsOnCreate,
    update_schema=WhatsOnUpdate,
    label_field="custom_title",
    derive=require_reference_or_title,
    revalidate_paths=_homepage_paths,
    default_sort="sort_order",
    default_desc=False,
    actions={"reorder": "manage"},
)

FEATURED_RESTAURANT = EntityDescriptor(
    name="Featured restaurant",
    table="featured_restaurants",
    module="featured_restaurants",
    activity_module="homepage",
    resource_type="featured_restaurant",
    row_model=FeaturedRestaurantResponse,
    create_schema=FeaturedRestaurantCreate,
    update_schema=FeaturedRestaurantUpdate,
    label_field="tenant_id",
    unique_messages={"tenant_id": "This restaurant is already featured"},
    revalidate_paths=lambda row: ["/", "/homepage", "/homepage/restaurants"],
    default_sort="sort_order",
    default_desc=False,
    joins=(RelatedJoin("tenant_id", "tenants", "tenant", "id, name, logo_url, category_id"),),
    actions={"reorder": "manage"},
)


class HomepageService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.whats_on = CrudEngine(WHATS_ON, backends)
        self.restaurants = CrudEngine(FEATURED_RESTAURANT, backends)

    # What's On

    def list_whats_on(self, active_only: bool = False) -> List[ResolvedWhatsOn]:
        query = self.supabase.table("whats_on").select("*")
        if active_only:
            query = query.eq("is_active", True)
        rows = self.whats_on.execute(query.order("sort_order")).data or []
        return self._resolve(rows)

    def get_whats_on(self, item_id: str) -> ResolvedWhatsOn:
        return self._resolve([self.whats_on.fetch(item_id)])[0]

    def _resolve(self, rows: List[Dict[str, Any]]) -> List[ResolvedWhatsOn]:
        try:
            return resolve_items(self.supabase, rows)
        except Exception as e:
            raise ActionError.of(ErrorCode.STORAGE_UNAVAILABLE) from e

    def create_whats_on(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.whats_on.create(ctx, payload)

    def update_whats_on(self, ctx: RequestContext, item_id: str, payload: Any) -> ActionResult:
        return self.whats_on.update(ctx, item_id, payload)

    def delete_whats_on(self, ctx: RequestContext, item_id: str) -> ActionResult:
        return self.whats_on.delete(ctx, item_id)

    def reorder_whats_on(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.whats_on.reorder(ctx, payload)

    def toggle_whats_on(self, ctx: RequestContext, item_id: str, is_active: Optional[bool] = None) -> ActionResult:
        return self.whats_on.toggle(
            ctx, item_id, "is_active", is_active,
            action="manage", on_message="enabled", off_message="disabled",
        )

    def reference_options(self, content_type: str) -> List[ReferenceOption]:
        """Candidate rows a feed item of `content_type` can point at."""
        if content_type not in CONTENT_TABLES:
            return []
        table, columns = CONTENT_TABLES[content_type]
        column, value, order_by, desc, limit = REFERENCE_QUERIES[content_type]
        rows = self.whats_on.execute(
            self.supabase.table(table)
            .select(columns)
            .eq(column, value)
            .order(order_by, desc=desc)
            .limit(limit)
        ).data or []
        options = []
        for row in rows:
            reference = to_reference_data(row)
            options.append(ReferenceOption(
                id=reference.id,
                label=reference.title or reference.name,
                image=reference.image_url or reference.logo_url,
            ))
        return options

    # Featured restaurants

    def list_restaurants(self, active_only: bool = False) -> List[FeaturedRestaurantResponse]:
        return self.restaurants.all(order_by="sort_order", filters={"is_active": True} if active_only else None)

    def get_restaurant(self, restaurant_id: str) -> FeaturedRestaurantResponse:
        return self.restaurants.get(restaurant_id)

    def create_restaurant(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.restaurants.create(ctx, payload)

    def update_restaurant(self, ctx: RequestContext, restaurant_id: str, payload: Any) -> ActionResult:
        return self.restaurants.update(ctx, restaurant_id, payload)

    def delete_restaurant(self, ctx: RequestContext, restaurant_id: str) -> ActionResult:
        return self.restaurants.delete(ctx, restaurant_id)

    def reorder_restaurants(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.restaurants.reorder(ctx, payload)

    def toggle_restaurant(self, ctx: RequestContext, restaurant_id: str, is_active: Optional[bool] = None) -> ActionResult:
        return self.restaurants.toggle(
            ctx, restaurant_id, "is_active", is_active,
            action="manage", on_message="enabled", off_message="disabled",
        )

    def restaurant_options(self) -> List[RestaurantTenant]:
        """Active tenants in food and beverage categories, or every active tenant when none match."""
        categories = self.restaurants.execute(
            self.supabase.table("tenant_categories").select("id").or_(RESTAURANT_CATEGORY_FILTER)
        ).data or []
        query = self.supabase.table("tenants")\
            .select("id, name, logo_url, category_id")\
            .eq("is_active", True)
        if categories:
            query = query.in_("category_id", [row["id"] for row in categories])
        rows = self.restaurants.execute(query.order("name")).data or []
        return [RestaurantTenant.model_validate(row) for row in rows]
