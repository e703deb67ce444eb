from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams
from mall_admin.core.schemas import FormModel, UUID, check_color, check_pattern, check_url

SLUG = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class PostBase(FormModel):
    title: str = Field(min_length=3, max_length=300)
    slug: Optional[str] = Field(None, min_length=3, max_length=200)
    excerpt: Optional[str] = Field(None, max_length=800)
    body: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = Field(None, max_length=70)
    meta_description: Optional[str] = Field(None, max_length=160)
    author_id: Optional[str] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return check_pattern(v, SLUG, "Slug must be lowercase with hyphens only")

    @field_validator("featured_image")
    @classmethod
    def check_image(cls, v):
        return check_url(v, "Invalid image URL")

    @field_validator("category_id")
    @classmethod
    def check_category(cls, v):
        return check_pattern(v, UUID, "Invalid category")

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return [tag.strip() for tag in v if tag and tag.strip()]


class PostCreate(PostBase):
    pass


class PostUpdate(PostBase):
    title: Optional[str] = Field(None, min_length=3, max_length=300)
    tags: Optional[List[str]] = None
    is_published: Optional[bool] = None
    is_featured: Optional[bool] = None

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        if v is None:
            return v
        return [tag.strip() for tag in v if tag and tag.strip()]


class BlogCategoryBase(FormModel):
    name: str = Field(min_length=2, max_length=100)
    slug: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return check_pattern(v, SLUG, "Slug must be lowercase with hyphens only")

    @field_validator("color")
    @classmethod
    def check_hex(cls, v):
        return check_color(v)


class BlogCategoryCreate(BlogCategoryBase):
    pass


class BlogCategoryUpdate(BlogCategoryBase):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=2, max_length=100)


class BlogCategorySummary(BaseModel):
    id: str
    name: str
    slug: str
    color: Optional[str] = None


class BlogCategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None
    post_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostResponse(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: Optional[str] = None
    body: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    author_id: Optional[str] = None
    category: Optional[BlogCategorySummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostListParams(ListParams):
    status: Optional[Literal["all", "draft", "published"]] = None
    featured: Optional[bool] = None
    category_id: Optional[str] = Field(default=None, alias="categoryId")
