from fastapi import APIRouter, Body, Depends
from typing import Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.homepage.schemas import (
    ContentType, FeaturedRestaurantResponse, ReferenceOption, ResolvedWhatsOn, RestaurantTenant,
)
from mall_admin.modules.homepage.service import HomepageService

router = APIRouter(prefix="/homepage", tags=["homepage"])


def get_homepage_service(backends: Backends = Depends(get_backends)) -> HomepageService:
    return HomepageService(backends)


# What's On endpoints
@router.get("/whats-on", response_model=List[ResolvedWhatsOn])
async def list_whats_on(
    active_only: bool = False,
    user: AuthUser = Depends(require_permission("whats_on", "view")),
    service: HomepageService = Depends(get_homepage_service)
):
    """List feed items in display order, each resolved against the entity it references"""
    return service.list_whats_on(active_only)


@router.post("/whats-on", status_code=201)
async def create_whats_on(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.create_whats_on(ctx, payload), 201)


@router.put("/whats-on/reorder")
async def reorder_whats_on(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.reorder_whats_on(ctx, payload))


@router.get("/whats-on/options/{content_type}", response_model=List[ReferenceOption])
async def reference_options(
    content_type: ContentType,
    user: AuthUser = Depends(require_permission("whats_on", "view")),
    service: HomepageService = Depends(get_homepage_service)
):
    return service.reference_options(content_type)


@router.get("/whats-on/{item_id}", response_model=ResolvedWhatsOn)
async def get_whats_on(
    item_id: str,
    user: AuthUser = Depends(require_permission("whats_on", "view")),
    service: HomepageService = Depends(get_homepage_service)
):
    return service.get_whats_on(item_id)


@router.put("/whats-on/{item_id}")
async def update_whats_on(
    item_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.update_whats_on(ctx, item_id, payload))


@router.patch("/whats-on/{item_id}/status")
async def toggle_whats_on(
    item_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.toggle_whats_on(ctx, item_id, toggle.value if toggle else None))


@router.delete("/whats-on/{item_id}")
async def delete_whats_on(
    item_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.delete_whats_on(ctx, item_id))


# Featured restaurant endpoints
@router.get("/restaurants", response_model=List[FeaturedRestaurantResponse])
async def list_restaurants(
    active_only: bool = False,
    user: AuthUser = Depends(require_permission("featured_restaurants", "view")),
    service: HomepageService = Depends(get_homepage_service)
):
    return service.list_restaurants(active_only)


@router.post("/restaurants", status_code=201)
async def create_restaurant(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.create_restaurant(ctx, payload), 201)


@router.put("/restaurants/reorder")
async def reorder_restaurants(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.reorder_restaurants(ctx, payload))


@router.get("/restaurants/options", response_model=List[RestaurantTenant])
async def restaurant_options(
    user: AuthUser = Depends(require_permission("featured_restaurants", "view")),
    service: HomepageService = Depends(get_homepage_service)
):
    return service.restaurant_options()


@router.get("/restaurants/{restaurant_id}", response_model=FeaturedRestaurantResponse)
async def get_restaurant(
    restaurant_id: str,
    user: AuthUser = Depends(require_permission("featured_restaurants", "view")),
    service: HomepageService = Depends(get_homepage_service)
):
    return service.get_restaurant(restaurant_id)


@router.put("/restaurants/{restaurant_id}")
async def update_restaurant(
    restaurant_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.update_restaurant(ctx, restaurant_id, payload))


@router.patch("/restaurants/{restaurant_id}/status")
async def toggle_restaurant(
    restaurant_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.toggle_restaurant(ctx, restaurant_id, toggle.value if toggle else None))


@router.delete("/restaurants/{restaurant_id}")
async def delete_restaurant(
    restaurant_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: HomepageService = Depends(get_homepage_service)
):
    return respond(service.delete_restaurant(ctx, restaurant_id))
