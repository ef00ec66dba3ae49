"""Group and membership schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class GroupCreate(BaseModel):
    """Create a new group. The slug is derived from the name when omitted."""

    name: str = Field(..., max_length=255)
    slug: str | None = Field(None, max_length=255)


class GroupResponse(BaseModel):
    """Group response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    created_at: datetime
    updated_at: datetime


class GroupMembershipResponse(BaseModel):
    """Group membership response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    group_id: int
    accepted: bool | None
    created_at: datetime
    updated_at: datetime
