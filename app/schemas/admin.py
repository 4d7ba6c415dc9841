# schemas/admin.py
from pydantic import BaseModel, Field, ConfigDict, StrictBool, field_validator


class SiteSettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    site_name: str
    allow_new_registrations: bool


class SiteSettingsUpdate(BaseModel):
    site_name: str = Field(..., min_length=1, max_length=255)
    allow_new_registrations: StrictBool

    @field_validator("site_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class AdminStats(BaseModel):
    total_users: int
    total_journals: int
    total_events: int
