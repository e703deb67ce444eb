from dataclasses import replace
from datetime import timedelta
from typing import Dict, List

from mall_admin.core import crud
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor
from mall_admin.core.listing import Page, RelatedJoin, attach_related
from mall_admin.modules.activity.schemas import (
    ActivityListParams, ActivityLogResponse, ContentCounts, DailyCount, DashboardStats, ModuleCount,
)

USER_JOIN = RelatedJoin("user_id", "admin_users", "user", "id, full_name, email, avatar_url")


def _filter_logs(query, params: ActivityListParams):
    if params.action and params.action != "all":
        query = query.eq("action", params.action)
    if params.module and params.module != "all":
        query = query.eq("module", params.module)
    if params.user_id:
        query = query.eq("user_id", params.user_id)
    if params.start_date:
        query = query.gte("created_at", params.start_date)
    if params.end_date:
        query = query.lte("created_at", params.end_date)
    return query


ACTIVITY_LOG = EntityDescriptor(
    name="Activity log",
    table="admin_activity_logs",
    module="activity_logs",
    activity_module="users",
    resource_type="activity_log",
    row_model=ActivityLogResponse,
    search_columns=("resource_name", "action", "module"),
    apply_filters=_filter_logs,
    joins=(USER_JOIN,),
)


class ActivityService:
    def __init__(self, backends: Backends):
        # Audit rows are only readable with the elevated client.
        self.supabase = backends.writer
        self.logs = CrudEngine(ACTIVITY_LOG, replace(backends, reader=backends.writer))

    def list_logs(self, params: ActivityListParams) -> Page:
        return self.logs.list(params)

    def get_log(self, log_id: str) -> ActivityLogResponse:
        return self.logs.get(log_id)

    def recent_activity(self, limit: int = 10) -> List[ActivityLogResponse]:
        rows = self.logs.execute(
            self.supabase.table("admin_activity_logs").select("*").order("created_at", desc=True).limit(limit)
        ).data or []
        attach_related(self.supabase, rows, USER_JOIN)
        return [self.logs.to_model(row) for row in rows]

    def content_counts(self) -> ContentCounts:
        now = crud.utcnow().isoformat()

        def rows(table: str, columns: str) -> List[Dict]:
            return self.logs.execute(self.supabase.table(table).select(columns)).data or []

        events = rows("events", "id, is_published, start_at")
        tenants = rows("tenants", "id, is_active, is_featured")
        posts = rows("posts", "id, is_published")
        promotions = rows("promotions", "id, status")
        contacts = rows("contacts", "id, is_read")
        tiers = rows("vip_tiers", "id, is_active")
        return ContentCounts(
            total_events=len(events),
            published_events=sum(1 for e in events if e.get("is_published")),
            upcoming_events=sum(1 for e in events if e.get("is_published") and (e.get("start_at") or "") > now),
            total_tenants=len(tenants),
            active_tenants=sum(1 for t in tenants if t.get("is_active")),
            featured_tenants=sum(1 for t in tenants if t.get("is_featured")),
            total_posts=len(posts),
            published_posts=sum(1 for p in posts if p.get("is_published")),
            total_promotions=len(promotions),
            active_promotions=sum(1 for p in promotions if p.get("status") == "published"),
            total_contacts=len(contacts),
            unread_contacts=sum(1 for c in contacts if c.get("is_read") is not True),
            total_vip_tiers=len(tiers),
            active_vip_tiers=sum(1 for v in tiers if v.get("is_active")),
        )

    def activity_breakdown(self, days: int = 30):
        """Per-day counts (every day in the window, zeros included) and per-module counts, busiest first."""
        today = crud.utcnow().date()
        start = today - timedelta(days=days)
        logs = self.logs.execute(
            self.supabase.table("admin_activity_logs")
            .select("created_at, module")
            .gte("created_at", start.isoformat())
            .order("created_at")
        ).data or []

        per_day: Dict[str, int] = {}
        per_module: Dict[str, int] = {}
        for log in logs:
            day = str(log.get("created_at") or "")[:10]
            per_day[day] = per_day.get(day, 0) + 1
            per_module[log.get("module")] = per_module.get(log.get("module"), 0) + 1

        by_day = []
        for offset in range(days + 1):
            day = (start + timedelta(days=offset)).isoformat()
            by_day.append(DailyCount(date=day, count=per_day.get(day, 0)))
        by_module = [
            ModuleCount(module=module, count=count)
            for module, count in sorted(per_module.items(), key=lambda item: item[1], reverse=True)
        ]
        return by_day, by_module

    def dashboard_stats(self, days: int = 30) -> DashboardStats:
        by_day, by_module = self.activity_breakdown(days)
        return DashboardStats(
            content=self.content_counts(),
            activity_by_day=by_day,
            activity_by_module=by_module,
            recent_activity=self.recent_activity(),
        )
