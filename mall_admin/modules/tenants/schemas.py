from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Literal, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams
from mall_admin.core.schemas import FormModel, UUID, check_color, check_pattern, check_url


class TenantBase(FormModel):
    tenant_code: str = Field(min_length=2, max_length=20)
    name: str = Field(min_length=2, max_length=200)
    category_id: str
    description: Optional[str] = Field(None, max_length=2000)
    main_floor: str = Field(min_length=1)
    operating_hours: Optional[Dict[str, str]] = None
    phone: Optional[str] = Field(None, max_length=50)
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False
    is_new_tenant: bool = False

    @field_validator("tenant_code", mode="before")
    @classmethod
    def uppercase_code(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("tenant_code")
    @classmethod
    def check_code(cls, v):
        return check_pattern(v, r"^[A-Z0-9-]+$", "Tenant code must be uppercase alphanumeric with dashes")

    @field_validator("category_id")
    @classmethod
    def check_category(cls, v):
        return check_pattern(v, UUID, "Please select a valid category")

    @field_validator("logo_url")
    @classmethod
    def check_logo(cls, v):
        return check_url(v, "Invalid logo URL")

    @field_validator("banner_url")
    @classmethod
    def check_banner(cls, v):
        return check_url(v, "Invalid banner URL")


class TenantCreate(TenantBase):
    pass


class TenantUpdate(TenantBase):
    tenant_code: Optional[str] = Field(None, min_length=2, max_length=20)
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    category_id: Optional[str] = None
    main_floor: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_new_tenant: Optional[bool] = None


class TenantCategoryBase(FormModel):
    name: str = Field(min_length=2, max_length=50)
    display_name: str = Field(min_length=2, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    sort_order: int = Field(0, ge=0)
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return check_pattern(v, r"^[a-z-]+$", "Name must be lowercase with hyphens only")

    @field_validator("color")
    @classmethod
    def check_hex(cls, v):
        return check_color(v)


class TenantCategoryCreate(TenantCategoryBase):
    pass


class TenantCategoryUpdate(TenantCategoryBase):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    display_name: Optional[str] = Field(None, min_length=2, max_length=100)
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class TenantCategorySummary(BaseModel):
    id: str
    name: str
    display_name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class TenantCategoryResponse(BaseModel):
    id: str
    name: str
    display_name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    tenant_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantResponse(BaseModel):
    id: str
    tenant_code: str
    name: str
    category_id: Optional[str] = None
    description: Optional[str] = None
    main_floor: Optional[str] = None
    operating_hours: Optional[Dict[str, Any]] = None
    phone: Optional[str] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    is_active: bool = True
    is_featured: bool = False
    is_new_tenant: bool = False
    category: Optional[TenantCategorySummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantListParams(ListParams):
    category_id: Optional[str] = Field(default=None, alias="categoryId")
    floor: Optional[str] = None
    status: Optional[Literal["all", "active", "inactive"]] = None
    featured: Optional[bool] = None
    new_tenant: Optional[bool] = Field(default=None, alias="newTenant")
