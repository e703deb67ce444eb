import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
URL = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)


class FormModel(BaseModel):
    """Base for submitted forms: strips strings, blank optional fields become None."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def blank_optional_to_none(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for name, info in cls.model_fields.items():
            if cleaned.get(name) == "" and not info.is_required():
                cleaned[name] = None
        return cleaned


def check_color(value: Optional[str]) -> Optional[str]:
    if value is not None and not HEX_COLOR.match(value):
        raise ValueError("Invalid color format")
    return value


def check_url(value: Optional[str], message: str = "Invalid URL") -> Optional[str]:
    if value is not None and not URL.match(value):
        raise ValueError(message)
    return value


def check_pattern(value: Optional[str], pattern: str, message: str) -> Optional[str]:
    if value is not None and not re.match(pattern, value):
        raise ValueError(message)
    return value


UUID = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"


class ToggleRequest(BaseModel):
    value: Optional[bool] = None


class ReorderItem(BaseModel):
    id: str
    sort_order: int


class IdsRequest(BaseModel):
    ids: List[str]


class ReorderRequest(BaseModel):
    items: List[ReorderItem]
