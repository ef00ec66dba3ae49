"""Pydantic schemas."""

from src.schemas.errors import (
    Errors,
    FieldError,
    FormatError,
    LengthError,
    PresenceError,
    RecordInvalid,
    UniquenessError,
    raise_if_invalid,
)
from src.schemas.group import GroupCreate, GroupMembershipResponse, GroupResponse
from src.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "Errors",
    "FieldError",
    "FormatError",
    "LengthError",
    "PresenceError",
    "RecordInvalid",
    "UniquenessError",
    "raise_if_invalid",
    "GroupCreate",
    "GroupMembershipResponse",
    "GroupResponse",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
