"""
Generic mutation and listing engine.

Every content entity is described once by an `EntityDescriptor` (table,
schemas, permission module, unique-field messages, referential guards,
derived-field rules, public paths to revalidate). `CrudEngine` runs the same
pipeline for all of them:

    permission gate -> schema validation (first error only) -> derived fields
    -> write (unique constraint violations become DUPLICATE) -> activity log
    -> route invalidation -> ActionResult

Uniqueness is enforced by the table's unique constraints; there is no
read-then-write pre-check.
"""

import functools
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError
from supabase import Client

from mall_admin.core.activity import ActivityLogger
from mall_admin.core.context import RequestContext
from mall_admin.core.errors import ActionError, ErrorCode, first_validation_message, map_storage_error
from mall_admin.core.listing import (
    ListParams,
    Page,
    RelatedJoin,
    attach_related,
    build_page,
    count_rows,
    search_filter,
)
from mall_admin.core.permissions import has_permission
from mall_admin.core.results import ActionResult
from mall_admin.core.revalidation import Revalidator
from mall_admin.core.schemas import ReorderRequest
from mall_admin.core.slug import generate_slug
from mall_admin.database.supabase_client import first_row

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Derive = Callable[[Row, Optional[Row], datetime], Row]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def guarded(fn):
    """Turn an ActionError (or any unexpected failure) raised by a mutation into a failure result."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs) -> ActionResult:
        try:
            return fn(*args, **kwargs)
        except ActionError as e:
            return ActionResult.from_error(e)
        except Exception as e:
            logger.exception(f"Unhandled error in {fn.__qualname__}: {e}")
            return ActionResult.from_error(ActionError.of(ErrorCode.STORAGE_UNAVAILABLE))
    return wrapper


def validate_payload(schema: Type[BaseModel], payload: Any, partial: bool = False) -> Row:
    """Validate a form payload or typed object; only the first failing rule is reported."""
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        model = schema.model_validate(payload or {})
    except ValidationError as e:
        raise ActionError(first_validation_message(e), ErrorCode.VALIDATION_FAILED)
    return model.model_dump(mode="json", exclude_unset=partial)


def stamp_first_publish(flag: str = "is_published", published_value: Any = True, timestamp: str = "published_at") -> Derive:
    """Set `timestamp` to now on the first transition into the published state, unless one is supplied or already stored."""
    def derive(data: Row, current: Optional[Row], now: datetime) -> Row:
        if data.get(flag) != published_value or data.get(timestamp):
            return data
        if current is not None and (current.get(flag) == published_value or current.get(timestamp)):
            return data
        data[timestamp] = now.isoformat()
        return data
    return derive


def slug_from(source: str = "title", target: str = "slug") -> Derive:
    """Fill a missing slug from another field on create."""
    def derive(data: Row, current: Optional[Row], now: datetime) -> Row:
        if current is None and not data.get(target):
            data[target] = generate_slug(data.get(source) or "")
            if not data[target]:
                raise ActionError(f"{target.capitalize()} is required", ErrorCode.VALIDATION_FAILED)
        return data
    return derive


def chain(*derives: Derive) -> Derive:
    def derive(data: Row, current: Optional[Row], now: datetime) -> Row:
        for step in derives:
            data = step(data, current, now)
        return data
    return derive


@dataclass
class ReferentialGuard:
    """Blocks deletion while rows in `table` reference the entity through `column`."""

    table: str
    column: str
    message: str  # formatted with {count}

    def count(self, supabase: Client, entity_id: str) -> int:
        return count_rows(supabase, self.table, {self.column: entity_id})


@dataclass
class EntityDescriptor:
    name: str
    table: str
    module: str
    activity_module: str
    resource_type: str
    row_model: Type[BaseModel]
    create_schema: Optional[Type[BaseModel]] = None
    update_schema: Optional[Type[BaseModel]] = None
    label_field: str = "name"
    unique_messages: Dict[str, str] = field(default_factory=dict)
    delete_guards: List[ReferentialGuard] = field(default_factory=list)
    derive: Optional[Derive] = None
    revalidate_paths: Callable[[Row], List[str]] = lambda row: []
    search_columns: Sequence[str] = ()
    sortable: Sequence[str] = ()
    default_sort: str = "created_at"
    default_desc: bool = True
    apply_filters: Optional[Callable[[Any, ListParams], Any]] = None
    joins: Sequence[RelatedJoin] = ()
    select: str = "*"
    actions: Dict[str, str] = field(default_factory=dict)  # engine operation -> permission action


@dataclass
class Backends:
    """Storage tiers and side channels handed to every service."""

    reader: Client
    writer: Client
    activity: ActivityLogger
    revalidator: Revalidator


class CrudEngine:
    def __init__(self, descriptor: EntityDescriptor, backends: Backends):
        self.d = descriptor
        self.reader = backends.reader
        self.writer = backends.writer
        self.activity = backends.activity
        self.revalidator = backends.revalidator

    # Gates and helpers

    def authorize(self, ctx: Optional[RequestContext], action: str) -> None:
        if ctx is None or ctx.user is None:
            raise ActionError.of(ErrorCode.UNAUTHORIZED)
        if not has_permission(ctx.user, self.d.module, action):
            raise ActionError(
                f"You don't have permission to {action.replace('_', ' ')} {self.d.module.replace('_', ' ')}",
                ErrorCode.FORBIDDEN,
            )

    def execute(self, query):
        try:
            return query.execute()
        except Exception as e:
            raise map_storage_error(e, self.d.unique_messages)

    def to_model(self, row: Row) -> BaseModel:
        try:
            return self.d.row_model.model_validate(row)
        except ValidationError as e:
            logger.error(f"Unexpected {self.d.table} row shape: {e}")
            raise ActionError.of(ErrorCode.STORAGE_UNAVAILABLE)

    def fetch(self, entity_id: str, client: Optional[Client] = None) -> Row:
        client = client or self.reader
        row = first_row(self.execute(
            client.table(self.d.table).select(self.d.select).eq("id", entity_id).limit(1)
        ))
        if row is None:
            raise ActionError(f"{self.d.name} not found", ErrorCode.NOT_FOUND)
        return row

    def fetch_by(self, column: str, value: Any) -> Optional[Row]:
        return first_row(self.execute(
            self.reader.table(self.d.table).select(self.d.select).eq(column, value).limit(1)
        ))

    def label(self, row: Optional[Row]) -> Optional[str]:
        if not row:
            return None
        value = row.get(self.d.label_field)
        return str(value) if value is not None else None

    def record(self, ctx: RequestContext, action: str, row: Optional[Row], **kwargs) -> None:
        self.activity.log(
            ctx,
            action=action,
            module=self.d.activity_module,
            resource_type=self.d.resource_type,
            resource_id=str(row["id"]) if row and row.get("id") is not None else None,
            resource_name=self.label(row),
            **kwargs,
        )

    def revalidate(self, *rows: Optional[Row]) -> None:
        paths: List[str] = []
        for row in rows:
            if row:
                paths.extend(self.d.revalidate_paths(row))
        try:
            self.revalidator.revalidate(paths)
        except Exception as e:
            logger.warning(f"Revalidation failed for {self.d.table}: {e}")

    def check_guards(self, entity_id: str) -> None:
        """Raise REFERENTIAL_CONFLICT while any guarded table still references the entity."""
        for guard in self.d.delete_guards:
            try:
                count = guard.count(self.writer, entity_id)
            except Exception as e:
                raise map_storage_error(e)
            if count > 0:
                raise ActionError(guard.message.format(count=count), ErrorCode.REFERENTIAL_CONFLICT)

    def _drop_cleared_required(self, data: Row) -> Row:
        fields = self.d.create_schema.model_fields if self.d.create_schema is not None else {}
        return {k: v for k, v in data.items() if not (v is None and k in fields and fields[k].is_required())}

    # Reads

    def get(self, entity_id: str) -> BaseModel:
        row = self.fetch(entity_id)
        for join in self.d.joins:
            attach_related(self.reader, [row], join)
        return self.to_model(row)

    def get_by(self, column: str, value: Any) -> BaseModel:
        row = self.fetch_by(column, value)
        if row is None:
            raise ActionError(f"{self.d.name} not found", ErrorCode.NOT_FOUND)
        for join in self.d.joins:
            attach_related(self.reader, [row], join)
        return self.to_model(row)

    def list(self, params: ListParams) -> Page:
        start, end = params.bounds()
        query = self.reader.table(self.d.table).select(self.d.select, count="exact")
        if params.search and params.search.strip() and self.d.search_columns:
            query = query.or_(search_filter(self.d.search_columns, params.search))
        if self.d.apply_filters is not None:
            query = self.d.apply_filters(query, params)

        sort_column = params.sort_by if params.sort_by in self.d.sortable else self.d.default_sort
        descending = params.sort_order == "desc" if params.sort_order else self.d.default_desc
        query = query.order(sort_column, desc=descending)
        if sort_column != "id":
            query = query.order("id")
        result = self.execute(query.range(start, end))

        rows = result.data or []
        total = result.count if result.count is not None else len(rows)
        for join in self.d.joins:
            try:
                attach_related(self.reader, rows, join)
            except Exception as e:
                raise map_storage_error(e)
        return build_page([self.to_model(row) for row in rows], total, params)

    def all(self, order_by: Optional[str] = None, desc: bool = False, filters: Optional[Row] = None) -> List[BaseModel]:
        query = self.reader.table(self.d.table).select(self.d.select)
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        query = query.order(order_by or self.d.default_sort, desc=desc)
        rows = self.execute(query).data or []
        for join in self.d.joins:
            attach_related(self.reader, rows, join)
        return [self.to_model(row) for row in rows]

    # Mutations

    @guarded
    def create(self, ctx: RequestContext, payload: Any) -> ActionResult:
        self.authorize(ctx, self.d.actions.get("create", "create"))
        data = validate_payload(self.d.create_schema, payload)
        if self.d.derive is not None:
            data = self.d.derive(data, None, utcnow())
        row = first_row(self.execute(self.writer.table(self.d.table).insert(data)))
        if row is None:
            raise ActionError(f"Failed to create {self.d.name.lower()}")
        entity = self.to_model(row)
        self.record(ctx, "create", row, new_values=data)
        self.revalidate(row)
        return ActionResult.ok(entity, f"{self.d.name} created successfully")

    @guarded
    def update(self, ctx: RequestContext, entity_id: str, payload: Any) -> ActionResult:
        self.authorize(ctx, self.d.actions.get("edit", "edit"))
        data = self._drop_cleared_required(validate_payload(self.d.update_schema, payload, partial=True))
        current = self.fetch(entity_id, client=self.writer)
        return self._write(ctx, entity_id, current, data, "update", f"{self.d.name} updated successfully")

    @guarded
    def set_fields(
        self,
        ctx: RequestContext,
        entity_id: str,
        values: Row,
        action: str = "edit",
        activity_action: str = "update",
        message: Optional[str] = None,
    ) -> ActionResult:
        self.authorize(ctx, self.d.actions.get(action, action))
        current = self.fetch(entity_id, client=self.writer)
        return self._write(ctx, entity_id, current, dict(values), activity_action, message or f"{self.d.name} updated successfully")

    def toggle(
        self,
        ctx: RequestContext,
        entity_id: str,
        column: str,
        value: Optional[bool] = None,
        action: str = "edit",
        on: str = "activate",
        off: str = "deactivate",
        on_message: str = "activated",
        off_message: str = "deactivated",
    ) -> ActionResult:
        """Set (or flip when `value` is None) a boolean column."""
        if value is None:
            try:
                self.authorize(ctx, self.d.actions.get(action, action))
                current = self.fetch(entity_id, client=self.writer)
            except ActionError as e:
                return ActionResult.from_error(e)
            value = not bool(current.get(column))
        return self.set_fields(
            ctx,
            entity_id,
            {column: value},
            action=action,
            activity_action=on if value else off,
            message=f"{self.d.name} {on_message if value else off_message} successfully",
        )

    def _write(self, ctx: RequestContext, entity_id: str, current: Row, data: Row, activity_action: str, message: str) -> ActionResult:
        if self.d.derive is not None:
            data = self.d.derive(data, current, utcnow())
        data["updated_at"] = utcnow().isoformat()
        row = first_row(self.execute(self.writer.table(self.d.table).update(data).eq("id", entity_id)))
        if row is None:
            raise ActionError(f"{self.d.name} not found", ErrorCode.NOT_FOUND)
        entity = self.to_model(row)
        changed = {k: v for k, v in data.items() if k != "updated_at"}
        self.record(
            ctx,
            activity_action,
            row,
            old_values={k: current.get(k) for k in changed},
            new_values=changed,
        )
        self.revalidate(current, row)
        return ActionResult.ok(entity, message)

    @guarded
    def reorder(self, ctx: RequestContext, payload: Any, column: str = "sort_order") -> ActionResult:
        """Apply {"items": [{"id", "sort_order"}]} one row at a time; stops at the first failed write."""
        self.authorize(ctx, self.d.actions.get("reorder", "edit"))
        items = validate_payload(ReorderRequest, payload)["items"]
        now = utcnow().isoformat()
        for item in items:
            self.execute(
                self.writer.table(self.d.table)
                .update({column: item["sort_order"], "updated_at": now})
                .eq("id", item["id"])
            )
        self.activity.log(
            ctx,
            action="reorder",
            module=self.d.activity_module,
            resource_type=self.d.resource_type,
            metadata={"count": len(items)},
        )
        self.revalidate(*items)
        return ActionResult.ok(None, "Order updated successfully")

    @guarded
    def delete(self, ctx: RequestContext, entity_id: str) -> ActionResult:
        self.authorize(ctx, self.d.actions.get("delete", "delete"))
        current = self.fetch(entity_id, client=self.writer)
        self.check_guards(entity_id)
        self.execute(self.writer.table(self.d.table).delete().eq("id", entity_id))
        self.record(ctx, "delete", current, old_values=current)
        self.revalidate(current)
        return ActionResult.ok(None, f"{self.d.name} deleted successfully")
