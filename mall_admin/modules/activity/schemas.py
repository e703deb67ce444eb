from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams


class ActivityUser(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class ActivityLogResponse(BaseModel):
    id: str
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
    user: Optional[ActivityUser] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActivityListParams(ListParams):
    per_page: int = Field(default=20, ge=1, le=100, alias="perPage")
    action: Optional[str] = None
    module: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")


class ContentCounts(BaseModel):
    total_events: int = 0
    published_events: int = 0
    upcoming_events: int = 0
    total_tenants: int = 0
    active_tenants: int = 0
    featured_tenants: int = 0
    total_posts: int = 0
    published_posts: int = 0
    total_promotions: int = 0
    active_promotions: int = 0
    total_contacts: int = 0
    unread_contacts: int = 0
    total_vip_tiers: int = 0
    active_vip_tiers: int = 0


class DailyCount(BaseModel):
    date: str
    count: int


class ModuleCount(BaseModel):
    module: str
    count: int


class DashboardStats(BaseModel):
    content: ContentCounts
    activity_by_day: List[DailyCount] = Field(default_factory=list)
    activity_by_module: List[ModuleCount] = Field(default_factory=list)
    recent_activity: List[ActivityLogResponse] = Field(default_factory=list)
