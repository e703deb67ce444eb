from fastapi import APIRouter, Body, Depends, Query
from typing import Annotated, Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends
from mall_admin.core.dependencies import get_backends, get_request_context, require_permission
from mall_admin.core.listing import Page
from mall_admin.core.permissions import AuthUser
from mall_admin.core.results import respond
from mall_admin.core.schemas import ToggleRequest
from mall_admin.modules.posts.schemas import BlogCategoryResponse, PostListParams, PostResponse
from mall_admin.modules.posts.service import PostService

router = APIRouter(prefix="/posts", tags=["blog"])


def get_post_service(backends: Backends = Depends(get_backends)) -> PostService:
    return PostService(backends)


@router.get("", response_model=Page[PostResponse])
async def list_posts(
    params: Annotated[PostListParams, Query()],
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    """List blog posts with search, status/category/tag filters and pagination"""
    return service.list_posts(params)


@router.post("", status_code=201)
async def create_post(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.create_post(ctx, payload), 201)


@router.get("/tags", response_model=List[str])
async def list_tags(
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.list_tags()


# Category endpoints
@router.get("/categories", response_model=List[BlogCategoryResponse])
async def list_categories(
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.list_categories()


@router.post("/categories", status_code=201)
async def create_category(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.create_category(ctx, payload), 201)


@router.put("/categories/{category_id}")
async def update_category(
    category_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.update_category(ctx, category_id, payload))


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.delete_category(ctx, category_id))


# Post endpoints
@router.get("/slug/{slug}", response_model=PostResponse)
async def get_post_by_slug(
    slug: str,
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.get_post_by_slug(slug)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    user: AuthUser = Depends(require_permission("posts", "view")),
    service: PostService = Depends(get_post_service)
):
    return service.get_post(post_id)


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.update_post(ctx, post_id, payload))


@router.patch("/{post_id}/publish")
async def toggle_publish(
    post_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.toggle_publish(ctx, post_id, toggle.value if toggle else None))


@router.patch("/{post_id}/featured")
async def toggle_featured(
    post_id: str,
    toggle: Optional[ToggleRequest] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.toggle_featured(ctx, post_id, toggle.value if toggle else None))


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PostService = Depends(get_post_service)
):
    return respond(service.delete_post(ctx, post_id))
