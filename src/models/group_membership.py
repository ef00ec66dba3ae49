"""Group membership model."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class GroupMembership(Base, TimestampMixin):
    """Join record linking a user to a group.

    ``accepted`` is a tri-state flag: ``None`` until the membership is
    reviewed, then ``True`` or ``False``.
    """

    __tablename__ = "group_memberships"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "group_id", name="index_group_memberships_on_user_id_and_group_id"
        ),
        Index("index_group_memberships_on_user_id", "user_id"),
        Index("index_group_memberships_on_group_id", "group_id"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    accepted = Column(Boolean, nullable=True)

    # Relationships
    user = relationship("User", back_populates="memberships")
    group = relationship("Group", back_populates="memberships")

    def __repr__(self) -> str:
        return (
            f"<GroupMembership user_id={self.user_id} group_id={self.group_id} "
            f"accepted={self.accepted}>"
        )
