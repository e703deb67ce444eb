from fastapi import APIRouter, Body, Depends, Query
from typing import Annotated, Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.events.schemas import EventListParams, EventResponse
from mall_admin.modules.events.service import EventService

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(backends: Backends = Depends(get_backends)) -> EventService:
    return EventService(backends)


@router.get("", response_model=Page[EventResponse])
async def list_events(
    params: Annotated[EventListParams, Query()],
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    """
    List events.

    `status` accepts draft/published (publication flag) or upcoming/ongoing/ended
    (relative to the current time); `startDate`/`endDate` bound the start date.
    """
    return service.list_events(params)


@router.post("", status_code=201)
async def create_event(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: EventService = Depends(get_event_service)
):
    return respond(service.create_event(ctx, payload), 201)


@router.get("/tags", response_model=List[str])
async def list_tags(
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.list_tags()


@router.get("/slug/{slug}", response_model=EventResponse)
async def get_event_by_slug(
    slug: str,
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.get_event_by_slug(slug)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    user: AuthUser = Depends(require_permission("events", "view")),
    service: EventService = Depends(get_event_service)
):
    return service.get_event(event_id)


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: EventService = Depends(get_event_service)
):
    return respond(service.update_event(ctx, event_id, payload))


@router.patch("/{event_id}/publish")
async def toggle_publish(
    event_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: EventService = Depends(get_event_service)
):
    return respond(service.toggle_publish(ctx, event_id, toggle.value if toggle else None))


@router.patch("/{event_id}/featured")
async def toggle_featured(
    event_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: EventService = Depends(get_event_service)
):
    return respond(service.toggle_featured(ctx, event_id, toggle.value if toggle else None))


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: EventService = Depends(get_event_service)
):
    return respond(service.delete_event(ctx, event_id))
