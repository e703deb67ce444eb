from pydantic import BaseModel, Field
from typing import Dict, Literal, Optional
from datetime import datetime

from mall_admin.core.listing import ListParams

EnquiryFilter = Literal["all", "General", "Leasing", "Marketing", "Legal", "Lost & Found", "Parking & Security"]


class ContactResponse(BaseModel):
    id: str
    full_name: str
    email: str
    phone_number: Optional[str] = None
    enquiry_type: Optional[str] = None
    enquiry_details: Optional[str] = None
    submitted_date: Optional[datetime] = None
    is_read: bool = False

    class Config:
        from_attributes = True


class ContactListParams(ListParams):
    enquiry_type: Optional[EnquiryFilter] = Field(default=None, alias="enquiryType")
    status: Optional[Literal["all", "read", "unread"]] = None
    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")


class ContactStats(BaseModel):
    total: int = 0
    unread: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict, serialization_alias="byType")
    today_count: int = Field(0, serialization_alias="todayCount")
    week_count: int = Field(0, serialization_alias="weekCount")
