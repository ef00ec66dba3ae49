"""SQLAlchemy models."""

from src.models.group import Group
from src.models.group_membership import GroupMembership
from src.models.user import User

__all__ = [
    "User",
    "Group",
    "GroupMembership",
]
