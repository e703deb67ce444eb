from fastapi import APIRouter, Body, Depends, Query
from typing import Annotated, Any, Dict

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.modules.contacts.schemas import ContactListParams, ContactResponse, ContactStats
from mall_admin.modules.contacts.service import ContactService

router = APIRouter(prefix="/contacts", tags=["contacts"])


def get_contact_service(backends: Backends = Depends(get_backends)) -> ContactService:
    return ContactService(backends)


@router.get("", response_model=Page[ContactResponse])
async def list_contacts(
    params: Annotated[ContactListParams, Query()],
    user: AuthUser = Depends(require_permission("contacts", "view")),
    service: ContactService = Depends(get_contact_service)
):
    """List contact form submissions, newest first by default"""
    return service.list_contacts(params)


@router.get("/stats", response_model=ContactStats)
async def contact_stats(
    user: AuthUser = Depends(require_permission("contacts", "view")),
    service: ContactService = Depends(get_contact_service)
):
    return service.stats()


@router.get("/export")
async def export_contacts(
    params: Annotated[ContactListParams, Query()],
    ctx: RequestContext = Depends(get_request_context),
    service: ContactService = Depends(get_contact_service)
):
    return respond(service.export(ctx, params))


@router.post("/read")
async def mark_many_read(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: ContactService = Depends(get_contact_service)
):
    """Mark several submissions as read: {"ids": [...]}"""
    return respond(service.mark_many_read(ctx, payload))


@router.post("/delete")
async def delete_many(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: ContactService = Depends(get_contact_service)
):
    return respond(service.delete_many(ctx, payload))


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: str,
    user: AuthUser = Depends(require_permission("contacts", "view")),
    service: ContactService = Depends(get_contact_service)
):
    return service.get_contact(contact_id)


@router.patch("/{contact_id}/read")
async def mark_read(
    contact_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ContactService = Depends(get_contact_service)
):
    return respond(service.mark_read(ctx, contact_id, True))


@router.patch("/{contact_id}/unread")
async def mark_unread(
    contact_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ContactService = Depends(get_contact_service)
):
    return respond(service.mark_read(ctx, contact_id, False))


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: ContactService = Depends(get_contact_service)
):
    return respond(service.delete_contact(ctx, contact_id))
