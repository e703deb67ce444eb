import logging
from datetime import timedelta
from typing import Any, Dict, List

from mall_admin.core import crud
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, guarded, stamp_first_publish, validate_payload
from mall_admin.core.listing import Page, RelatedJoin
from mall_admin.core.results import ActionResult
from mall_admin.modules.promotions.schemas import (
    PromotionCreate, PromotionListParams, PromotionResponse, PromotionStatusUpdate, PromotionTenant, PromotionUpdate,
)

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS = 3

STATUS_MESSAGES = {
    "staging": "Promotion moved to staging",
    "published": "Promotion published",
    "expired": "Promotion marked as expired",
}


def _filter_promotions(query, params: PromotionListParams):
    if params.status and params.status != "all":
        query = query.eq("status", params.status)
    if params.tenant_id:
        query = query.eq("tenant_id", params.tenant_id)
    if params.start_date:
        query = query.gte("start_date", params.start_date)
    if params.end_date:
        query = query.lte("end_date", params.end_date)
    return query


def _promotion_paths(row: Dict[str, Any]) -> List[str]:
    return ["/", "/promotions", f"/promotions/{row.get('id')}"]


PROMOTION = EntityDescriptor(
    name="Promotion",
    table="promotions",
    module="promotions",
    activity_module="promotions",
    resource_type="promotion",
    row_model=PromotionResponse,
    create_schema=PromotionCreate,
    update_schema=PromotionUpdate,
    label_field="title",
    derive=stamp_first_publish(flag="status", published_value="published"),
    revalidate_paths=_promotion_paths,
    search_columns=("title", "full_description"),
    sortable=("title", "status", "start_date", "end_date", "created_at", "updated_at"),
    apply_filters=_filter_promotions,
    joins=(RelatedJoin("tenant_id", "tenants", "tenant", "id, name, tenant_code, logo_url, main_floor"),),
)


class PromotionService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.writer = backends.writer
        self.promotions = CrudEngine(PROMOTION, backends)

    def list_promotions(self, params: PromotionListParams) -> Page:
        return self.promotions.list(params)

    def get_promotion(self, promotion_id: str) -> PromotionResponse:
        return self.promotions.get(promotion_id)

    def create_promotion(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.promotions.create(ctx, payload)

    def update_promotion(self, ctx: RequestContext, promotion_id: str, payload: Any) -> ActionResult:
        return self.promotions.update(ctx, promotion_id, payload)

    def delete_promotion(self, ctx: RequestContext, promotion_id: str) -> ActionResult:
        return self.promotions.delete(ctx, promotion_id)

    @guarded
    def update_status(self, ctx: RequestContext, promotion_id: str, payload: Any) -> ActionResult:
        self.promotions.authorize(ctx, "publish")
        status = validate_payload(PromotionStatusUpdate, payload)["status"]
        return self.promotions.set_fields(
            ctx,
            promotion_id,
            {"status": status},
            action="publish",
            activity_action="update_status",
            message=STATUS_MESSAGES[status],
        )

    @guarded
    def auto_expire(self, ctx: RequestContext) -> ActionResult:
        """Move every published promotion whose end date has passed to expired."""
        self.promotions.authorize(ctx, "publish")
        now = crud.utcnow()
        result = self.promotions.execute(
            self.writer.table("promotions")
            .update({"status": "expired", "updated_at": now.isoformat()})
            .eq("status", "published")
            .lt("end_date", now.isoformat())
        )
        rows = result.data or []
        if rows:
            logger.info(f"Auto-expired {len(rows)} promotion(s)")
            self.promotions.revalidate(*rows)
        return ActionResult.ok(len(rows), f"{len(rows)} promotion(s) expired")

    def expiring_soon(self) -> List[PromotionResponse]:
        """Published promotions ending within the next few days."""
        now = crud.utcnow()
        horizon = now + timedelta(days=EXPIRY_WARNING_DAYS)
        result = self.promotions.execute(
            self.supabase.table("promotions")
            .select("*")
            .eq("status", "published")
            .lte("end_date", horizon.isoformat())
            .gte("end_date", now.isoformat())
            .order("end_date")
        )
        return [self.promotions.to_model(row) for row in result.data or []]

    def tenant_options(self) -> List[PromotionTenant]:
        result = self.promotions.execute(
            self.supabase.table("tenants")
            .select("id, name, tenant_code, logo_url, main_floor")
            .eq("is_active", True)
            .order("name")
        )
        return [PromotionTenant.model_validate(row) for row in result.data or []]
