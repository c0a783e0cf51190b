from pydantic import BaseModel, Field, field_validator, field_serializer
from datetime import datetime
import re


class SignupRequest(BaseModel):
    username: str = Field(
        ..., min_length=3, max_length=30, description="Username must be 3-30 characters"
    )
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate and normalize username."""
        v = v.strip()
        if not re.match(r"^[A-Za-z0-9_-]+$", v):
            raise ValueError("Username can only contain letters, numbers, underscores, and hyphens")

        if v[0] in "_-" or v[-1] in "_-":
            raise ValueError("Username cannot start or end with an underscore or hyphen")

        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength"""
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: str
    username: str
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value, _info):
        """Convert datetime to ISO format string"""
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
