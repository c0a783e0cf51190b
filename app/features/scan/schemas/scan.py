"""
Scan Schemas

Request and response models for the scan API endpoints.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from app.features.scan.models.scan import ScanStatus
from app.platform.utils.url_validator import validate_url


class ScanCreateRequest(BaseModel):
    """Request to start an accessibility scan."""
    url: str

    @field_validator("url")
    @classmethod
    def validate_target(cls, v: str) -> str:
        is_valid, _, error_message = validate_url(v)
        if not is_valid:
            raise ValueError(error_message)
        # Stored as submitted; the fetcher resolves the scheme later
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "url": "example.com"
            }
        }


class ScanResponse(BaseModel):
    id: str
    user_id: str
    url: str
    status: ScanStatus
    report_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
