"""
Best-effort audit trail.

Entries are written to admin_activity_logs after a successful operation. When
the request has BackgroundTasks the write happens after the response is sent;
otherwise it runs inline. A failed write is logged and dropped, it never
changes the outcome of the operation that triggered it.
"""

import logging
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from supabase import Client

from mall_admin.core.context import RequestContext

logger = logging.getLogger(__name__)

ACTIVITY_ACTIONS = [
    "create", "update", "delete", "login", "logout", "publish", "unpublish",
    "feature", "unfeature", "activate", "deactivate", "export", "reorder", "update_status",
    "change_password", "reset_password", "read", "unread",
]

ACTIVITY_MODULES = [
    "auth", "events", "tenants", "blog", "promotions", "contacts", "vip", "homepage", "settings", "users",
]


class ActivityEntry(BaseModel):
    user_id: Optional[str] = None
    action: str
    module: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    resource_name: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ActivityLogger:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def log(
        self,
        ctx: RequestContext,
        action: str,
        module: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        resource_name: Optional[str] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> None:
        if action not in ACTIVITY_ACTIONS or module not in ACTIVITY_MODULES:
            logger.warning(f"Unrecognised activity {module}.{action}")
        entry = ActivityEntry(
            user_id=user_id or ctx.user_id,
            action=action,
            module=module,
            resource_type=resource_type,
            resource_id=resource_id,
            resource_name=resource_name,
            old_values=old_values,
            new_values=new_values,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
            metadata=metadata,
        )
        if ctx.background_tasks is not None:
            ctx.background_tasks.add_task(self.write, entry)
        else:
            self.write(entry)

    def write(self, entry: ActivityEntry) -> None:
        try:
            self.supabase.table("admin_activity_logs")\
                .insert(jsonable_encoder(entry.model_dump()))\
                .execute()
        except Exception as e:
            logger.error(f"Failed to log activity {entry.module}.{entry.action}: {e}")
