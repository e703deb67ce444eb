from datetime import timedelta
from typing import Any, Dict, List, Optional

from mall_admin.core import crud
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, guarded, validate_payload
from mall_admin.core.listing import Page
from mall_admin.core.results import ActionResult
from mall_admin.core.schemas import IdsRequest
from mall_admin.modules.contacts.schemas import ContactListParams, ContactResponse, ContactStats


def _filter_contacts(query, params: ContactListParams):
    if params.enquiry_type and params.enquiry_type != "all":
        query = query.eq("enquiry_type", params.enquiry_type)
    if params.status and params.status != "all":
        query = query.eq("is_read", params.status == "read")
    if params.start_date:
        query = query.gte("submitted_date", params.start_date)
    if params.end_date:
        query = query.lte("submitted_date", params.end_date)
    return query


CONTACT = EntityDescriptor(
    name="Contact",
    table="contacts",
    module="contacts",
    activity_module="contacts",
    resource_type="contact",
    row_model=ContactResponse,
    label_field="full_name",
    revalidate_paths=lambda row: ["/contacts", f"/contacts/{row.get('id')}"],
    search_columns=("full_name", "email", "enquiry_details"),
    sortable=("submitted_date", "full_name", "email", "enquiry_type"),
    default_sort="submitted_date",
    apply_filters=_filter_contacts,
)


class ContactService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.writer = backends.writer
        self.contacts = CrudEngine(CONTACT, backends)

    def list_contacts(self, params: ContactListParams) -> Page:
        return self.contacts.list(params)

    def get_contact(self, contact_id: str) -> ContactResponse:
        return self.contacts.get(contact_id)

    def mark_read(self, ctx: RequestContext, contact_id: str, is_read: bool = True) -> ActionResult:
        return self.contacts.set_fields(
            ctx,
            contact_id,
            {"is_read": is_read},
            action="respond",
            activity_action="read" if is_read else "unread",
            message="Marked as read" if is_read else "Marked as unread",
        )

    @guarded
    def mark_many_read(self, ctx: RequestContext, payload: Any) -> ActionResult:
        self.contacts.authorize(ctx, "respond")
        ids = validate_payload(IdsRequest, payload)["ids"]
        if ids:
            self.contacts.execute(self.writer.table("contacts").update({"is_read": True}).in_("id", ids))
        self.contacts.activity.log(
            ctx, action="read", module="contacts", resource_type="contact", metadata={"count": len(ids), "ids": ids},
        )
        self.contacts.revalidator.revalidate(["/contacts"])
        return ActionResult.ok(None, f"{len(ids)} contact(s) marked as read")

    def delete_contact(self, ctx: RequestContext, contact_id: str) -> ActionResult:
        return self.contacts.delete(ctx, contact_id)

    @guarded
    def delete_many(self, ctx: RequestContext, payload: Any) -> ActionResult:
        self.contacts.authorize(ctx, "delete")
        ids = validate_payload(IdsRequest, payload)["ids"]
        if ids:
            self.contacts.execute(self.writer.table("contacts").delete().in_("id", ids))
        self.contacts.activity.log(
            ctx, action="delete", module="contacts", resource_type="contact", metadata={"count": len(ids), "ids": ids},
        )
        self.contacts.revalidator.revalidate(["/contacts"])
        return ActionResult.ok(None, f"{len(ids)} contact(s) deleted")

    def _count(self, column: Optional[str] = None, since: Optional[str] = None, **filters) -> int:
        query = self.supabase.table("contacts").select("id", count="exact")
        for key, value in filters.items():
            query = query.eq(key, value)
        if column and since:
            query = query.gte(column, since)
        result = self.contacts.execute(query)
        return result.count if result.count is not None else len(result.data or [])

    def stats(self) -> ContactStats:
        now = crud.utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        types = self.contacts.execute(self.supabase.table("contacts").select("enquiry_type")).data or []
        by_type: Dict[str, int] = {}
        for row in types:
            by_type[row.get("enquiry_type")] = by_type.get(row.get("enquiry_type"), 0) + 1
        return ContactStats(
            total=self._count(),
            unread=self._count(is_read=False),
            by_type=by_type,
            today_count=self._count("submitted_date", start_of_day.isoformat()),
            week_count=self._count("submitted_date", (now - timedelta(days=7)).isoformat()),
        )

    @guarded
    def export(self, ctx: RequestContext, params: ContactListParams) -> ActionResult:
        """Every contact matching the filters, newest first; the export itself is logged."""
        self.contacts.authorize(ctx, "respond")
        query = _filter_contacts(self.supabase.table("contacts").select("*"), params)
        rows = self.contacts.execute(query.order("submitted_date", desc=True)).data or []
        contacts: List[ContactResponse] = [self.contacts.to_model(row) for row in rows]
        self.contacts.activity.log(
            ctx,
            action="export",
            module="contacts",
            resource_type="contact",
            metadata={
                "count": len(contacts),
                "filters": params.model_dump(include={"enquiry_type", "status", "start_date", "end_date"}, exclude_none=True),
            },
        )
        return ActionResult.ok(contacts, f"Exported {len(contacts)} contacts")
