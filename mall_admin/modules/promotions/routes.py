from fastapi import APIRouter, Body, Depends, Query
from typing import Annotated, Any, Dict, List

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.modules.promotions.schemas import PromotionListParams, PromotionResponse, PromotionTenant
from mall_admin.modules.promotions.service import PromotionService

router = APIRouter(prefix="/promotions", tags=["promotions"])


def get_promotion_service(backends: Backends = Depends(get_backends)) -> PromotionService:
    return PromotionService(backends)


@router.get("", response_model=Page[PromotionResponse])
async def list_promotions(
    params: Annotated[PromotionListParams, Query()],
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.list_promotions(params)


@router.post("", status_code=201)
async def create_promotion(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PromotionService = Depends(get_promotion_service)
):
    return respond(service.create_promotion(ctx, payload), 201)


@router.get("/expiring", response_model=List[PromotionResponse])
async def expiring_promotions(
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    """Published promotions whose end date falls within the next three days"""
    return service.expiring_soon()


@router.post("/auto-expire")
async def auto_expire_promotions(
    ctx: RequestContext = Depends(get_request_context),
    service: PromotionService = Depends(get_promotion_service)
):
    return respond(service.auto_expire(ctx))


@router.get("/tenant-options", response_model=List[PromotionTenant])
async def tenant_options(
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.tenant_options()


@router.get("/{promotion_id}", response_model=PromotionResponse)
async def get_promotion(
    promotion_id: str,
    user: AuthUser = Depends(require_permission("promotions", "view")),
    service: PromotionService = Depends(get_promotion_service)
):
    return service.get_promotion(promotion_id)


@router.put("/{promotion_id}")
async def update_promotion(
    promotion_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PromotionService = Depends(get_promotion_service)
):
    return respond(service.update_promotion(ctx, promotion_id, payload))


@router.patch("/{promotion_id}/status")
async def update_promotion_status(
    promotion_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PromotionService = Depends(get_promotion_service)
):
    return respond(service.update_status(ctx, promotion_id, payload))


@router.delete("/{promotion_id}")
async def delete_promotion(
    promotion_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PromotionService = Depends(get_promotion_service)
):
    return respond(service.delete_promotion(ctx, promotion_id))
