from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from mall_admin.core.schemas import FormModel, UUID, check_color, check_pattern


class VipTierBase(FormModel):
    name: str = Field(min_length=2, max_length=50)
    description: str = Field(min_length=10, max_length=500)
    qualification_requirement: str = Field(min_length=10, max_length=1000)
    minimum_spend_amount: float = Field(0, ge=0)
    minimum_receipt_amount: Optional[float] = Field(None, ge=0)
    tier_level: int = Field(ge=1, le=10)
    card_color: str = "#6b7280"
    is_active: bool = True
    sort_order: int = Field(0, ge=0)

    @field_validator("card_color")
    @classmethod
    def check_hex(cls, v):
        return check_color(v)


class VipTierCreate(VipTierBase):
    pass


class VipTierUpdate(VipTierBase):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, min_length=10, max_length=500)
    qualification_requirement: Optional[str] = Field(None, min_length=10, max_length=1000)
    minimum_spend_amount: Optional[float] = Field(None, ge=0)
    tier_level: Optional[int] = Field(None, ge=1, le=10)
    card_color: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class VipBenefitBase(FormModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    icon: str = Field("gift", max_length=50)
    is_active: bool = True
    sort_order: int = Field(0, ge=0)


class VipBenefitCreate(VipBenefitBase):
    pass


class VipBenefitUpdate(VipBenefitBase):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class TierBenefitAssignment(FormModel):
    benefit_id: str
    benefit_note: Optional[str] = Field(None, max_length=200)
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator("benefit_id")
    @classmethod
    def check_benefit(cls, v):
        return check_pattern(v, UUID, "Invalid benefit ID")


class TierBenefitsUpdate(BaseModel):
    benefits: List[TierBenefitAssignment] = Field(default_factory=list)


class VipBenefitResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TierBenefit(VipBenefitResponse):
    benefit_note: Optional[str] = None
    display_order: int = 0


class VipTierResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    qualification_requirement: Optional[str] = None
    minimum_spend_amount: float = 0
    minimum_receipt_amount: Optional[float] = None
    tier_level: int
    card_color: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0
    benefits: List[TierBenefit] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
