from typing import Any, Dict, List, Optional

from mall_admin.core import crud
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, chain, slug_from, stamp_first_publish
from mall_admin.core.listing import Page
from mall_admin.core.results import ActionResult
from mall_admin.modules.events.schemas import EventCreate, EventListParams, EventResponse, EventUpdate


def _filter_events(query, params: EventListParams):
    now = crud.utcnow().isoformat()
    if params.status == "draft":
        query = query.eq("is_published", False)
    elif params.status == "published":
        query = query.eq("is_published", True)
    elif params.status == "upcoming":
        query = query.gt("start_at", now)
    elif params.status == "ongoing":
        query = query.lte("start_at", now).or_(f"end_at.is.null,end_at.gte.{now}")
    elif params.status == "ended":
        query = query.lt("end_at", now)

    if params.featured is not None:
        query = query.eq("is_featured", params.featured)
    if params.start_date:
        query = query.gte("start_at", params.start_date)
    if params.end_date:
        query = query.lte("start_at", params.end_date)
    if params.tags:
        query = query.contains("tags", params.tags)
    return query


def _event_paths(row: Dict[str, Any]) -> List[str]:
    return ["/", "/events", f"/events/{row.get('slug')}"]


EVENT = EntityDescriptor(
    name="Event",
    table="events",
    module="events",
    activity_module="events",
    resource_type="event",
    row_model=EventResponse,
    create_schema=EventCreate,
    update_schema=EventUpdate,
    label_field="title",
    unique_messages={"slug": "An event with this slug already exists"},
    derive=chain(slug_from("title"), stamp_first_publish()),
    revalidate_paths=_event_paths,
    search_columns=("title", "summary", "venue"),
    sortable=("title", "start_at", "end_at", "created_at", "updated_at"),
    default_sort="start_at",
    apply_filters=_filter_events,
)


class EventService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.events = CrudEngine(EVENT, backends)

    def list_events(self, params: EventListParams) -> Page:
        return self.events.list(params)

    def get_event(self, event_id: str) -> EventResponse:
        return self.events.get(event_id)

    def get_event_by_slug(self, slug: str) -> EventResponse:
        return self.events.get_by("slug", slug)

    def create_event(self, ctx: RequestContext, payload: Any) -> ActionResult:
        return self.events.create(ctx, payload)

    def update_event(self, ctx: RequestContext, event_id: str, payload: Any) -> ActionResult:
        return self.events.update(ctx, event_id, payload)

    def delete_event(self, ctx: RequestContext, event_id: str) -> ActionResult:
        return self.events.delete(ctx, event_id)

    def toggle_publish(self, ctx: RequestContext, event_id: str, is_published: Optional[bool] = None) -> ActionResult:
        return self.events.toggle(
            ctx, event_id, "is_published", is_published,
            action="publish", on="publish", off="unpublish",
            on_message="published", off_message="unpublished",
        )

    def toggle_featured(self, ctx: RequestContext, event_id: str, is_featured: Optional[bool] = None) -> ActionResult:
        return self.events.toggle(
            ctx, event_id, "is_featured", is_featured,
            action="feature", on="feature", off="unfeature",
            on_message="featured", off_message="unfeatured",
        )

    def list_tags(self) -> List[str]:
        result = self.events.execute(self.supabase.table("events").select("tags"))
        return sorted({tag for row in result.data or [] for tag in row.get("tags") or []})
