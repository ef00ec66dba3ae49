"""User schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    """Create a new user."""

    name: str = Field(..., max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., max_length=128)
    preferences: dict[str, Any] = Field(default_factory=dict)


class UserUpdate(BaseModel):
    """Update a user. Omitted fields are left unchanged."""

    name: str | None = Field(None, max_length=255)
    email: EmailStr | None = Field(None, max_length=255)
    password: str | None = Field(None, max_length=128)
    preferences: dict[str, Any] | None = None


class UserResponse(BaseModel):
    """User information response. Never carries credentials."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    preferences: dict[str, Any]
    created_at: datetime
    updated_at: datetime
