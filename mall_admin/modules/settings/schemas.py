from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Literal, Optional, Union
from datetime import datetime

from mall_admin.core.schemas import FormModel, check_pattern, check_url

SettingType = Literal["meta_tag", "script", "link", "json_ld", "custom_html"]
InjectionPoint = Literal["head_start", "head_end", "body_start", "body_end"]


class SiteSettingBase(FormModel):
    key: str = Field(min_length=2, max_length=100)
    display_name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    value: Optional[str] = Field(None, max_length=10000)
    setting_type: SettingType
    injection_point: InjectionPoint
    is_active: bool = True
    sort_order: int = Field(0, ge=0)

    @field_validator("key")
    @classmethod
    def check_key(cls, v):
        return check_pattern(v, r"^[a-z0-9_]+$", "Key must be lowercase alphanumeric with underscores")


class SiteSettingCreate(SiteSettingBase):
    created_by: Optional[str] = None


class SiteSettingUpdate(SiteSettingBase):
    key: Optional[str] = Field(None, min_length=2, max_length=100)
    display_name: Optional[str] = Field(None, min_length=2, max_length=100)
    setting_type: Optional[SettingType] = None
    injection_point: Optional[InjectionPoint] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class SiteSettingResponse(BaseModel):
    id: str
    key: str
    display_name: str
    description: Optional[str] = None
    value: Optional[str] = None
    setting_type: Optional[str] = None
    injection_point: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Settings groups. Every field has a default; blank strings mean "not set".

class SettingsGroup(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


def _url_or_blank(value: str, message: str = "Invalid URL") -> str:
    check_url(value or None, message)
    return value


class GeneralSettings(SettingsGroup):
    site_name: str = Field("Supermal Karawaci", min_length=2, max_length=100)
    site_tagline: str = Field("", max_length=200)
    site_description: str = Field("", max_length=500)
    logo_url: str = ""
    logo_dark_url: str = ""
    favicon_url: str = ""
    default_language: str = "id"
    timezone: str = "Asia/Jakarta"

    @field_validator("logo_url", "logo_dark_url", "favicon_url")
    @classmethod
    def check_urls(cls, v, info):
        labels = {"logo_url": "logo", "logo_dark_url": "dark logo", "favicon_url": "favicon"}
        return _url_or_blank(v, f"Invalid {labels[info.field_name]} URL")


class ContactSettings(SettingsGroup):
    address: str = Field("", max_length=500)
    city: str = Field("Tangerang", max_length=100)
    postal_code: str = Field("", max_length=20)
    country: str = "Indonesia"
    phone_primary: str = Field("", max_length=20)
    phone_secondary: str = Field("", max_length=20)
    email_general: Union[EmailStr, Literal[""]] = ""
    email_marketing: Union[EmailStr, Literal[""]] = ""
    email_leasing: Union[EmailStr, Literal[""]] = ""
    google_maps_url: str = ""
    google_maps_embed: str = Field("", max_length=2000)
    latitude: str = ""
    longitude: str = ""

    @field_validator("google_maps_url")
    @classmethod
    def check_maps(cls, v):
        return _url_or_blank(v, "Invalid Google Maps URL")


class SocialSettings(SettingsGroup):
    facebook_url: str = ""
    instagram_url: str = ""
    twitter_url: str = ""
    youtube_url: str = ""
    tiktok_url: str = ""
    linkedin_url: str = ""
    whatsapp_number: str = Field("", max_length=20)

    @field_validator("facebook_url", "instagram_url", "twitter_url", "youtube_url", "tiktok_url", "linkedin_url")
    @classmethod
    def check_urls(cls, v):
        return _url_or_blank(v)


class SeoSettings(SettingsGroup):
    meta_title: str = Field("", max_length=70)
    meta_description: str = Field("", max_length=160)
    meta_keywords: str = Field("", max_length=500)
    og_title: str = Field("", max_length=100)
    og_description: str = Field("", max_length=300)
    og_image_url: str = ""
    og_type: str = "website"
    twitter_card: Literal["summary", "summary_large_image"] = "summary_large_image"
    twitter_site: str = Field("", max_length=50)
    twitter_creator: str = Field("", max_length=50)
    canonical_url: str = ""
    robots: str = "index, follow"
    google_site_verification: str = ""
    bing_site_verification: str = ""

    @field_validator("og_image_url", "canonical_url")
    @classmethod
    def check_urls(cls, v):
        return _url_or_blank(v)


class AnalyticsSettings(SettingsGroup):
    google_analytics_id: str = Field("", max_length=50)
    google_tag_manager_id: str = Field("", max_length=50)
    meta_pixel_id: str = Field("", max_length=50)
    tiktok_pixel_id: str = Field("", max_length=50)
    hotjar_id: str = Field("", max_length=50)


class DayHours(BaseModel):
    open: str = "10:00"
    close: str = "22:00"
    closed: bool = False

    @field_validator("open", "close")
    @classmethod
    def check_time(cls, v):
        return check_pattern(v, r"^([01]\d|2[0-3]):[0-5]\d$", "Time must be in HH:MM format")


class OperatingHoursSettings(SettingsGroup):
    monday: DayHours = Field(default_factory=DayHours)
    tuesday: DayHours = Field(default_factory=DayHours)
    wednesday: DayHours = Field(default_factory=DayHours)
    thursday: DayHours = Field(default_factory=DayHours)
    friday: DayHours = Field(default_factory=DayHours)
    saturday: DayHours = Field(default_factory=DayHours)
    sunday: DayHours = Field(default_factory=DayHours)
    holidays: str = ""
    special_note: str = Field("", max_length=500)
