"""Group model."""

from sqlalchemy import Column, Index, Integer, String
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.group_membership import GroupMembership
from src.models.mixins import TimestampMixin


class Group(Base, TimestampMixin):
    """Named group that users can join."""

    __tablename__ = "groups"
    __table_args__ = (
        Index("index_groups_on_name", "name", unique=True),
        Index("index_groups_on_slug", "slug", unique=True),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)  # URL-safe, derived from name by default

    # Relationships
    memberships = relationship(
        "GroupMembership",
        back_populates="group",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    users = association_proxy(
        "memberships", "user", creator=lambda user: GroupMembership(user=user)
    )

    def __repr__(self) -> str:
        return f"<Group id={self.id} slug={self.slug!r}>"
