import json
import logging
from typing import Any, Dict, List, Optional

from mall_admin.core import crud
from mall_admin.core.context import RequestContext
from mall_admin.core.crud import Backends, CrudEngine, EntityDescriptor, guarded, validate_payload
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.results import ActionResult
from mall_admin.database.supabase_client import first_row
from mall_admin.modules.settings.schemas import (
    AnalyticsSettings, ContactSettings, GeneralSettings, OperatingHoursSettings, SeoSettings, SocialSettings,
    SiteSettingCreate, SiteSettingResponse, SiteSettingUpdate,
)

logger = logging.getLogger(__name__)

GROUP_KEY_PREFIX = "settings_"

# group name -> (display name, schema)
SETTINGS_GROUPS: Dict[str, tuple] = {
    "general": ("General Settings", GeneralSettings),
    "contact": ("Contact Settings", ContactSettings),
    "social": ("Social Settings", SocialSettings),
    "seo": ("SEO Settings", SeoSettings),
    "analytics": ("Analytics Settings", AnalyticsSettings),
    "operating_hours": ("Operating Hours", OperatingHoursSettings),
}

SITE_SETTING = EntityDescriptor(
    name="Setting",
    table="site_settings",
    module="seo_settings",
    activity_module="settings",
    resource_type="site_setting",
    row_model=SiteSettingResponse,
    create_schema=SiteSettingCreate,
    update_schema=SiteSettingUpdate,
    label_field="display_name",
    unique_messages={"key": "A setting with this key already exists"},
    revalidate_paths=lambda row: ["/", "/settings"],
    default_sort="sort_order",
    default_desc=False,
    actions={"create": "edit", "delete": "edit"},
)


def group_key(group: str) -> str:
    return f"{GROUP_KEY_PREFIX}{group}"


def _group(group: str) -> tuple:
    if group not in SETTINGS_GROUPS:
        raise ActionError(f"Unknown settings group: {group}", ErrorCode.NOT_FOUND)
    return SETTINGS_GROUPS[group]


class SettingsService:
    def __init__(self, backends: Backends):
        self.supabase = backends.reader
        self.writer = backends.writer
        self.settings = CrudEngine(SITE_SETTING, backends)

    # Injected settings (scripts, meta tags, ...)

    def list_settings(
        self,
        setting_type: Optional[str] = None,
        injection_point: Optional[str] = None,
        include_groups: bool = False,
    ) -> List[SiteSettingResponse]:
        query = self.supabase.table("site_settings").select("*")
        if setting_type:
            query = query.eq("setting_type", setting_type)
        if injection_point:
            query = query.eq("injection_point", injection_point)
        if not include_groups:
            query = query.not_.like("key", f"{GROUP_KEY_PREFIX}%")
        rows = self.settings.execute(query.order("sort_order")).data or []
        return [self.settings.to_model(row) for row in rows]

    def get_setting(self, setting_id: str) -> SiteSettingResponse:
        return self.settings.get(setting_id)

    def get_setting_by_key(self, key: str) -> SiteSettingResponse:
        return self.settings.get_by("key", key)

    def active_settings(self, injection_point: str) -> List[SiteSettingResponse]:
        """Active injected settings for one injection point, in sort order."""
        rows = self.settings.execute(
            self.supabase.table("site_settings")
            .select("*")
            .eq("injection_point", injection_point)
            .eq("is_active", True)
            .not_.like("key", f"{GROUP_KEY_PREFIX}%")
            .order("sort_order")
        ).data or []
        return [self.settings.to_model(row) for row in rows]

    def create_setting(self, ctx: RequestContext, payload: Any) -> ActionResult:
        if isinstance(payload, dict) and ctx is not None and ctx.user is not None:
            payload = {**payload, "created_by": ctx.user.id}
        return self.settings.create(ctx, payload)

    def update_setting(self, ctx: RequestContext, setting_id: str, payload: Any) -> ActionResult:
        return self.settings.update(ctx, setting_id, payload)

    @guarded
    def delete_setting(self, ctx: RequestContext, setting_id: str) -> ActionResult:
        self.settings.authorize(ctx, "edit")
        current = self.settings.fetch(setting_id, client=self.writer)
        if str(current.get("key", "")).startswith(GROUP_KEY_PREFIX):
            raise ActionError("Cannot delete core settings", ErrorCode.VALIDATION_FAILED)
        return self.settings.delete(ctx, setting_id)

    def toggle_setting(self, ctx: RequestContext, setting_id: str, is_active: Optional[bool] = None) -> ActionResult:
        return self.settings.toggle(ctx, setting_id, "is_active", is_active)

    # Settings groups

    def get_group(self, group: str) -> Dict[str, Any]:
        """Stored group values merged over the group's defaults."""
        _, schema = _group(group)
        defaults = schema().model_dump()
        row = first_row(self.settings.execute(
            self.supabase.table("site_settings").select("value").eq("key", group_key(group)).limit(1)
        ))
        if not row or not row.get("value"):
            return defaults
        try:
            stored = json.loads(row["value"])
        except ValueError:
            logger.warning(f"Settings group {group} holds invalid JSON; using defaults")
            return defaults
        if not isinstance(stored, dict):
            return defaults
        return {**defaults, **stored}

    @guarded
    def save_group(self, ctx: RequestContext, group: str, payload: Any) -> ActionResult:
        self.settings.authorize(ctx, "edit")
        display_name, schema = _group(group)
        values = validate_payload(schema, payload)
        existing = first_row(self.settings.execute(
            self.writer.table("site_settings").select("id").eq("key", group_key(group)).limit(1)
        ))
        row = {
            "key": group_key(group),
            "display_name": display_name,
            "description": f"{display_name} configuration",
            "value": json.dumps(values),
            "setting_type": "json_ld",
            "injection_point": "head_end",
            "is_active": True,
            "sort_order": 0,
            "updated_at": crud.utcnow().isoformat(),
        }
        # The creator is recorded once, on the first save.
        if existing is None:
            row["created_by"] = ctx.user_id
        self.settings.execute(self.writer.table("site_settings").upsert(row, on_conflict="key"))
        self.settings.activity.log(
            ctx,
            action="update",
            module="settings",
            resource_type="settings_group",
            resource_id=group_key(group),
            resource_name=display_name,
            new_values=values,
        )
        self.settings.revalidate({"key": group_key(group)})
        return ActionResult.ok(values, "Settings saved successfully")

