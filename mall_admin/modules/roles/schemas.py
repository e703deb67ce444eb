from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from mall_admin.core.schemas import FormModel, UUID, check_color, check_pattern


class RoleBase(FormModel):
    name: str = Field(min_length=2, max_length=50)
    display_name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: str = "#6366f1"
    is_active: bool = True
    permission_ids: List[str] = []

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return check_pattern(v, r"^[a-z_]+$", "Name must be lowercase with underscores only")

    @field_validator("color")
    @classmethod
    def check_role_color(cls, v):
        return check_color(v)

    @field_validator("permission_ids")
    @classmethod
    def check_permissions(cls, v):
        if v is None:
            return v
        for permission_id in v:
            check_pattern(permission_id, UUID, "Invalid permission ID")
        return list(dict.fromkeys(v))


class RoleCreate(RoleBase):
    pass


class RoleUpdate(RoleBase):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    display_name: Optional[str] = Field(None, min_length=2, max_length=100)
    color: Optional[str] = None
    is_active: Optional[bool] = None
    permission_ids: Optional[List[str]] = None


class PermissionResponse(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    module: str
    action: str
    description: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True


class PermissionGroup(BaseModel):
    module: str
    description: Optional[str] = None
    permissions: List[PermissionResponse]


class RoleResponse(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user_count: int = 0
    permission_count: int = 0

    class Config:
        from_attributes = True


class RoleWithPermissionsResponse(RoleResponse):
    permissions: List[PermissionResponse] = []
