from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from mall_admin.core.schemas import FormModel, UUID, check_pattern, check_url

ContentType = Literal["event", "tenant", "post", "promotion", "custom"]


class WhatsOnBase(FormModel):
    content_type: ContentType
    reference_id: Optional[str] = None
    custom_title: Optional[str] = Field(None, max_length=100)
    custom_description: Optional[str] = Field(None, max_length=500)
    custom_image_url: Optional[str] = None
    custom_link_url: Optional[str] = None
    sort_order: int = Field(0, ge=0)
    is_active: bool = True
    override_start_date: Optional[datetime] = None
    override_end_date: Optional[datetime] = None

    @field_validator("reference_id")
    @classmethod
    def check_reference(cls, v):
        return check_pattern(v, UUID, "Invalid reference ID")

    @field_validator("custom_image_url")
    @classmethod
    def check_image(cls, v):
        return check_url(v, "Invalid image URL")

    @field_validator("custom_link_url")
    @classmethod
    def check_link(cls, v):
        return check_url(v, "Invalid link URL")


class WhatsOnCreate(WhatsOnBase):
    pass


class WhatsOnUpdate(WhatsOnBase):
    content_type: Optional[ContentType] = None
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ReferenceData(BaseModel):
    id: str
    title: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None
    logo_url: Optional[str] = None


class WhatsOnResponse(BaseModel):
    id: str
    content_type: ContentType
    reference_id: Optional[str] = None
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    custom_image_url: Optional[str] = None
    custom_link_url: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    override_start_date: Optional[datetime] = None
    override_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResolvedWhatsOn(WhatsOnResponse):
    reference_data: Optional[ReferenceData] = None
    display_title: Optional[str] = None
    display_image: Optional[str] = None


class ReferenceOption(BaseModel):
    id: str
    label: Optional[str] = None
    image: Optional[str] = None


class FeaturedRestaurantBase(FormModel):
    tenant_id: str
    featured_image_url: Optional[str] = None
    featured_description: Optional[str] = Field(None, max_length=300)
    highlight_text: Optional[str] = Field(None, max_length=50)
    sort_order: int = Field(0, ge=0)
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("tenant_id")
    @classmethod
    def check_tenant(cls, v):
        return check_pattern(v, UUID, "Invalid tenant ID")

    @field_validator("featured_image_url")
    @classmethod
    def check_image(cls, v):
        return check_url(v, "Invalid image URL")


class FeaturedRestaurantCreate(FeaturedRestaurantBase):
    pass


class FeaturedRestaurantUpdate(FeaturedRestaurantBase):
    tenant_id: Optional[str] = None
    sort_order: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class RestaurantTenant(BaseModel):
    id: str
    name: str
    logo_url: Optional[str] = None
    category_id: Optional[str] = None


class FeaturedRestaurantResponse(BaseModel):
    id: str
    tenant_id: str
    featured_image_url: Optional[str] = None
    featured_description: Optional[str] = None
    highlight_text: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tenant: Optional[RestaurantTenant] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
