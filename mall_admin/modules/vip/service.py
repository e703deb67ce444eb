from typing import Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, ReferentialGuard, guarded, validate_payload
from mall_admin.core.listing import group_by
from mall_admin.core.results import ActionResult
from mall_admin.modules.vip.schemas import (
    TierBenefit, TierBenefitsUpdate,
    VipBenefitCreate, VipBenefitResponse, VipBenefitUpdate,
    VipTierCreate, VipTierResponse, VipTierUpdate,
)


def _tier_paths(row: Dict[str, Any]) -> List[str]:
    return ["/vip", f"/vip/tiers/{row.get('id')}"]


VIP_TIER = EntityDescriptor(
    name="VIP tier",
    table="vip_tiers",
    module="vip",
    activity_module="vip",
    resource_type="tier",
    row_model=VipTierResponse,
    create_schema=VipTierCreate,
    update_schema=VipTierUpdate,
    unique_messages={"tier_level": "A tier with this level already exists"},
    delete_guards=[
        ReferentialGuard(
            "vip_tier_benefits", "tier_id",
            "Cannot delete tier with {count} benefit(s) assigned. Remove benefits first.",
        ),
    ],
    revalidate_paths=_tier_paths,
    default_sort="tier_level",
    default_desc=False,
)

VIP_BENEFIT = EntityDescriptor(
    name="VIP benefit",
    table="vip_benefits",
    module="vip",
    activity_module="vip",
    resource_type="benefit",
    row_model=VipBenefitResponse,
    create_schema=VipBenefitCreate,
    update_schema=VipBenefitUpdate,
    delete_guards=[
        ReferentialGuard(
            "vip_tier_benefits", "benefit_id",
            "Cannot delete benefit assigned to {count} tier(s). Remove from tiers first.",
        ),
    ],
    revalidate_paths=lambda row: ["/vip", "/vip/benefits"],
    default_sort="sort_order",
    default_desc=False,
)


class VipService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.writer = backends.writer
        self.tiers = CrudEngine(VIP_TIER, backends)
        self.benefits = CrudEngine(VIP_BENEFIT, backends)

    def _tier_benefits(self, tier_ids: List[str]) -> Dict[str, List[TierBenefit]]:
        """Benefits assigned to each tier, ordered by display_order."""
        if not tier_ids:
            return {}
        links = self.tiers.execute(
            self.supabase.table("vip_tier_benefits")
            .select("tier_id, benefit_id, benefit_note, display_order")
            .in_("tier_id", tier_ids)
            .order("display_order")
        ).data or []
        benefit_ids = list({link["benefit_id"] for link in links})
        benefits = {}
        if benefit_ids:
            rows = self.benefits.execute(
                self.supabase.table("vip_benefits").select("*").in_("id", benefit_ids)
            ).data or []
            benefits = {row["id"]: row for row in rows}

        attached: Dict[str, List[TierBenefit]] = {}
        for tier_id, tier_links in group_by(links, "tier_id").items():
            attached[tier_id] = [
                TierBenefit.model_validate({
                    **benefits[link["benefit_id"]],
                    "benefit_note": link.get("benefit_note"),
                    "display_order": link.get("display_order") or 0,
                })
                for link in tier_links
                if link["benefit_id"] in benefits
            ]
        return attached

    # Tiers

    def list_tiers(self, active_only: bool = False) -> List[VipTierResponse]:
        tiers = self.tiers.all(order_by="tier_level", filters={"is_active": True} if active_only else None)
        attached = self._tier_benefits([tier.id for tier in tiers])
        for tier in tiers:
            tier.benefits = attached.get(tier.id, [])
        return tiers

    def get_tier(self, tier_id: str) -> VipTierResponse:
        tier = self.tiers.get(tier_id)
        tier.benefits = self._tier_benefits([tier.id]).get(tier.id, [])
        return tier

    def create_tier(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.tiers.create(ctx, payload)

    def update_tier(self, ctx: RequestContext, tier_id: str, payload: Any) -> ActionResult:
        return self.tiers.update(ctx, tier_id, payload)

    def delete_tier(self, ctx: RequestContext, tier_id: str) -> ActionResult:
        return self.tiers.delete(ctx, tier_id)

    def toggle_tier_status(self, ctx: RequestContext, tier_id: str, is_active: Optional[bool] = None) -> ActionResult:
        return self.tiers.toggle(ctx, tier_id, "is_active", is_active)

    @guarded
    def replace_tier_benefits(self, ctx: RequestContext, tier_id: str, payload: Any) -> ActionResult:
        """
        Replace the benefit assignments of a tier.

        Existing assignments are deleted and the new list inserted; a missing
        display_order defaults to the benefit's position in the list.
        """
        self.tiers.authorize(ctx, "manage")
        assignments = validate_payload(TierBenefitsUpdate, payload)["benefits"]
        tier = self.tiers.fetch(tier_id, client=self.writer)

        self.tiers.execute(self.writer.table("vip_tier_benefits").delete().eq("tier_id", tier_id))
        if assignments:
            rows = [
                {
                    "tier_id": tier_id,
                    "benefit_id": item["benefit_id"],
                    "benefit_note": item.get("benefit_note"),
                    "display_order": item["display_order"] if item.get("display_order") is not None else index,
                }
                for index, item in enumerate(assignments)
            ]
            self.tiers.execute(self.writer.table("vip_tier_benefits").insert(rows))

        self.tiers.activity.log(
            ctx,
            action="update",
            module="vip",
            resource_type="tier_benefits",
            resource_id=tier_id,
            resource_name=tier.get("name"),
            new_values={"benefit_count": len(assignments)},
        )
        self.tiers.revalidate(tier)
        return ActionResult.ok(None, "Tier benefits updated successfully")

    # Benefits

    def list_benefits(self) -> List[VipBenefitResponse]:
        return self.benefits.all(order_by="sort_order")

    def get_benefit(self, benefit_id: str) -> VipBenefitResponse:
        return self.benefits.get(benefit_id)

    def create_benefit(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.benefits.create(ctx, payload)

    def update_benefit(self, ctx: RequestContext, benefit_id: str, payload: Any) -> ActionResult:
        return self.benefits.update(ctx, benefit_id, payload)

    def delete_benefit(self, ctx: RequestContext, benefit_id: str) -> ActionResult:
        return self.benefits.delete(ctx, benefit_id)
