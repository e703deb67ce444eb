from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams
from mall_admin.core.schemas import FormModel, UUID, check_pattern, check_url

PromotionStatus = Literal["staging", "published", "expired"]


class PromotionBase(FormModel):
    title: str = Field(min_length=3, max_length=300)
    tenant_id: str
    full_description: Optional[str] = Field(None, max_length=2000)
    image_url: Optional[str] = None
    source_post: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: PromotionStatus = "staging"

    @field_validator("tenant_id")
    @classmethod
    def check_tenant(cls, v):
        return check_pattern(v, UUID, "Please select a valid tenant")

    @field_validator("image_url")
    @classmethod
    def check_image(cls, v):
        return check_url(v, "Invalid image URL")

    @field_validator("source_post")
    @classmethod
    def check_source(cls, v):
        return check_url(v)


class PromotionCreate(PromotionBase):
    pass


class PromotionUpdate(PromotionBase):
    title: Optional[str] = Field(None, min_length=3, max_length=300)
    tenant_id: Optional[str] = None
    status: Optional[PromotionStatus] = None


class PromotionStatusUpdate(BaseModel):
    status: PromotionStatus


class PromotionTenant(BaseModel):
    id: str
    name: str
    tenant_code: Optional[str] = None
    logo_url: Optional[str] = None
    main_floor: Optional[str] = None


class PromotionResponse(BaseModel):
    id: str
    title: str
    tenant_id: Optional[str] = None
    full_description: Optional[str] = None
    image_url: Optional[str] = None
    source_post: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: PromotionStatus = "staging"
    published_at: Optional[datetime] = None
    tenant: Optional[PromotionTenant] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PromotionListParams(ListParams):
    status: Optional[Literal["all", "staging", "published", "expired"]] = None
    tenant_id: Optional[str] = Field(default=None, alias="tenantId")
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
