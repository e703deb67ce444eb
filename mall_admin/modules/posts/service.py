from typing import Any, Dict, List, Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import (
    Backends, CrudEngine, EntityDescriptor, ReferentialGuard,
    chain, slug_from, stamp_first_publish,
)
from mall_admin.core.listing import Page, RelatedJoin
from mall_admin.core.results import ActionResult
from mall_admin.modules.posts.schemas import (
    BlogCategoryCreate, BlogCategoryResponse, BlogCategoryUpdate,
    PostCreate, PostListParams, PostResponse, PostUpdate,
)


def _filter_posts(query, params: PostListParams):
    if params.status == "draft":
        query = query.eq("is_published", False)
    elif params.status == "published":
        query = query.eq("is_published", True)
    if params.featured is not None:
        query = query.eq("is_featured", params.featured)
    category_id = params.category_id or params.category
    if category_id:
        query = query.eq("category_id", category_id)
    if params.tags:
        query = query.contains("tags", params.tags)
    return query


def _post_paths(row: Dict[str, Any]) -> List[str]:
    return ["/", "/blog", f"/blog/{row.get('slug')}"]


POST = EntityDescriptor(
    name="Post",
    table="posts",
    module="posts",
    activity_module="blog",
    resource_type="post",
    row_model=PostResponse,
    create_schema=PostCreate,
    update_schema=PostUpdate,
    label_field="title",
    unique_messages={"slug": "A post with this slug already exists"},
    derive=chain(slug_from("title"), stamp_first_publish()),
    revalidate_paths=_post_paths,
    search_columns=("title", "excerpt"),
    sortable=("title", "created_at", "updated_at", "published_at"),
    apply_filters=_filter_posts,
    joins=(RelatedJoin("category_id", "blog_categories", "category", "id, name, slug, color"),),
)

BLOG_CATEGORY = EntityDescriptor(
    name="Category",
    table="blog_categories",
    module="posts",
    activity_module="blog",
    resource_type="blog_category",
    row_model=BlogCategoryResponse,
    create_schema=BlogCategoryCreate,
    update_schema=BlogCategoryUpdate,
    unique_messages={"slug": "A category with this slug already exists"},
    delete_guards=[
        ReferentialGuard(
            "posts", "category_id",
            "Cannot delete category with {count} post(s). Move posts first.",
        ),
    ],
    revalidate_paths=lambda row: ["/blog"],
    default_sort="name",
    default_desc=False,
    actions={"create": "manage", "edit": "manage", "delete": "manage"},
)


class PostService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.posts = CrudEngine(POST, backends)
        self.categories = CrudEngine(BLOG_CATEGORY, backends)

    def list_posts(self, params: PostListParams) -> Page:
        return self.posts.list(params)

    def get_post(self, post_id: str) -> PostResponse:
        return self.posts.get(post_id)

    def get_post_by_slug(self, slug: str) -> PostResponse:
        return self.posts.get_by("slug", slug)

    def create_post(self, ctx: RequestContext, payload: Any) -> ActionResult:
        if isinstance(payload, dict) and ctx is not None and ctx.user is not None:
            payload = {**payload, "author_id": payload.get("author_id") or ctx.user.id}
        return self.posts.create(ctx, payload)

    def update_post(self, ctx: RequestContext, post_id: str, payload: Any) -> ActionResult:
        return self.posts.update(ctx, post_id, payload)

    def delete_post(self, ctx: RequestContext, post_id: str) -> ActionResult:
        return self.posts.delete(ctx, post_id)

    def toggle_publish(self, ctx: RequestContext, post_id: str, is_published: Optional[bool] = None) -> ActionResult:
        return self.posts.toggle(
            ctx, post_id, "is_published", is_published,
            action="publish", on="publish", off="unpublish",
            on_message="published", off_message="unpublished",
        )

    def toggle_featured(self, ctx: RequestContext, post_id: str, is_featured: Optional[bool] = None) -> ActionResult:
        return self.posts.toggle(
            ctx, post_id, "is_featured", is_featured,
            action="feature", on="feature", off="unfeature",
            on_message="featured", off_message="unfeatured",
        )

    def list_tags(self) -> List[str]:
        result = self.posts.execute(self.supabase.table("posts").select("tags"))
        return sorted({tag for row in result.data or [] for tag in row.get("tags") or []})

    # Categories

    def list_categories(self) -> List[BlogCategoryResponse]:
        categories = self.categories.all(order_by="name")
        usage = self.posts.execute(self.supabase.table("posts").select("category_id")).data or []
        counts: Dict[str, int] = {}
        for row in usage:
            if row.get("category_id"):
                counts[row["category_id"]] = counts.get(row["category_id"], 0) + 1
        for category in categories:
            category.post_count = counts.get(category.id, 0)
        return categories

    def create_category(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.categories.create(ctx, payload)

    def update_category(self, ctx: RequestContext, category_id: str, payload: Any) -> ActionResult:
        return self.categories.update(ctx, category_id, payload)

    def delete_category(self, ctx: RequestContext, category_id: str) -> ActionResult:
        return self.categories.delete(ctx, category_id)
