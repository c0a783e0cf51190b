"""
Report Settings Schemas

Branding a user can attach to their PDF reports.
"""
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

MAX_LOGO_LENGTH = 2 * 1024 * 1024


class ReportColors(BaseModel):
    """Report palette. Keys are camelCase on the wire."""
    model_config = ConfigDict(populate_by_name=True)

    primary: str = "#2563eb"
    secondary: str = "#6b7280"
    accent: str = "#0ea5e9"
    text_primary: str = Field(default="#111827", alias="textPrimary")
    text_secondary: str = Field(default="#4b5563", alias="textSecondary")
    background: str = "#ffffff"

    @field_validator("primary", "secondary", "accent", "text_primary", "text_secondary", "background")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        v = v.strip()
        if not HEX_COLOR.match(v):
            raise ValueError(f"'{v}' is not a hex color (#rgb or #rrggbb)")
        if len(v) == 4:
            v = "#" + "".join(c * 2 for c in v[1:])
        return v.lower()


DEFAULT_COLORS = ReportColors()


class ReportSettingsUpdate(BaseModel):
    company_name: Optional[str] = Field(default=None, max_length=255)
    company_logo: Optional[str] = Field(default=None, max_length=MAX_LOGO_LENGTH)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(default=None, max_length=50)
    website_url: Optional[str] = Field(default=None, max_length=2048)
    colors: Optional[ReportColors] = None

    @field_validator("company_logo")
    @classmethod
    def validate_logo(cls, v: Optional[str]) -> Optional[str]:
        if v and not v.startswith("data:image/"):
            raise ValueError("company_logo must be a data:image/... URI")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "company_name": "Acme Inc",
                "contact_email": "a11y@acme.example",
                "website_url": "https://acme.example",
                "colors": {"primary": "#1d4ed8", "accent": "#0ea5e9"},
            }
        }


class ReportSettingsResponse(BaseModel):
    id: str
    user_id: str
    company_name: Optional[str] = None
    company_logo: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website_url: Optional[str] = None
    colors: ReportColors = DEFAULT_COLORS
    created_at: datetime
    updated_at: datetime

    @field_validator("colors", mode="before")
    @classmethod
    def fill_default_colors(cls, v):
        # stored palettes may be partial or missing
        return v or {}

    class Config:
        from_attributes = True
