from fastapi import APIRouter, Body, Depends
from typing import Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.vip.schemas import VipBenefitResponse, VipTierResponse
from mall_admin.modules.vip.service import VipService

router = APIRouter(prefix="/vip", tags=["vip"])


def get_vip_service(backends: Backends = Depends(get_backends)) -> VipService:
    return VipService(backends)


# Tier endpoints
@router.get("/tiers", response_model=List[VipTierResponse])
async def list_tiers(
    active_only: bool = False,
    user: AuthUser = Depends(require_permission("vip", "view")),
    service: VipService = Depends(get_vip_service)
):
    """List VIP tiers by level, each with its assigned benefits"""
    return service.list_tiers(active_only)


@router.post("/tiers", status_code=201)
async def create_tier(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.create_tier(ctx, payload), 201)


@router.get("/tiers/{tier_id}", response_model=VipTierResponse)
async def get_tier(
    tier_id: str,
    user: AuthUser = Depends(require_permission("vip", "view")),
    service: VipService = Depends(get_vip_service)
):
    return service.get_tier(tier_id)


@router.put("/tiers/{tier_id}")
async def update_tier(
    tier_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.update_tier(ctx, tier_id, payload))


@router.patch("/tiers/{tier_id}/status")
async def toggle_tier_status(
    tier_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.toggle_tier_status(ctx, tier_id, toggle.value if toggle else None))


@router.put("/tiers/{tier_id}/benefits")
async def replace_tier_benefits(
    tier_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    """Replace the tier's benefit list: {"benefits": [{"benefit_id", "benefit_note", "display_order"}]}"""
    return respond(service.replace_tier_benefits(ctx, tier_id, payload))


@router.delete("/tiers/{tier_id}")
async def delete_tier(
    tier_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.delete_tier(ctx, tier_id))


# Benefit endpoints
@router.get("/benefits", response_model=List[VipBenefitResponse])
async def list_benefits(
    user: AuthUser = Depends(require_permission("vip", "view")),
    service: VipService = Depends(get_vip_service)
):
    return service.list_benefits()


@router.post("/benefits", status_code=201)
async def create_benefit(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.create_benefit(ctx, payload), 201)


@router.get("/benefits/{benefit_id}", response_model=VipBenefitResponse)
async def get_benefit(
    benefit_id: str,
    user: AuthUser = Depends(require_permission("vip", "view")),
    service: VipService = Depends(get_vip_service)
):
    return service.get_benefit(benefit_id)


@router.put("/benefits/{benefit_id}")
async def update_benefit(
    benefit_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.update_benefit(ctx, benefit_id, payload))


@router.delete("/benefits/{benefit_id}")
async def delete_benefit(
    benefit_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: VipService = Depends(get_vip_service)
):
    return respond(service.delete_benefit(ctx, benefit_id))
