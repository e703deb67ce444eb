from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams
from mall_admin.core.schemas import FormModel, check_pattern, check_url

SLUG = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class EventImage(BaseModel):
    url: str
    alt: Optional[str] = None
    caption: Optional[str] = None


def normalize_images(value):
    """Legacy rows store plain URL strings; always expose {url, alt, caption} objects."""
    if value is None:
        return []
    return [{"url": item} if isinstance(item, str) else item for item in value]


class EventBase(FormModel):
    title: str = Field(min_length=3, max_length=300)
    slug: Optional[str] = Field(None, min_length=3, max_length=200)
    summary: Optional[str] = Field(None, max_length=800)
    body: Optional[str] = None
    start_at: datetime
    end_at: Optional[datetime] = None
    venue: Optional[str] = Field(None, max_length=200)
    images: List[EventImage] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False
    published_at: Optional[datetime] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return check_pattern(v, SLUG, "Slug must be lowercase with hyphens only")

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, v):
        return normalize_images(v)

    @field_validator("images")
    @classmethod
    def check_images(cls, v):
        for image in v or []:
            check_url(image.url, "Invalid image URL")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        if v is None:
            return v
        return [tag.strip() for tag in v if isinstance(tag, str) and tag.strip()]


class EventCreate(EventBase):
    pass


class EventUpdate(EventBase):
    title: Optional[str] = Field(None, min_length=3, max_length=300)
    start_at: Optional[datetime] = None
    images: Optional[List[EventImage]] = None
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, v):
        return None if v is None else normalize_images(v)


class EventResponse(BaseModel):
    id: str
    title: str
    slug: str
    summary: Optional[str] = None
    body: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    venue: Optional[str] = None
    images: List[EventImage] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("images", mode="before")
    @classmethod
    def coerce_images(cls, v):
        return normalize_images(v)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v):
        return v or []

    class Config:
        from_attributes = True


class EventListParams(ListParams):
    status: Optional[Literal["all", "draft", "published", "upcoming", "ongoing", "ended"]] = None
    featured: Optional[bool] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
