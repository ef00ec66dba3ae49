"""User model."""

from sqlalchemy import JSON, CheckConstraint, Column, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.group_membership import GroupMembership
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and group membership.

    ``password`` is a write-only attribute: assigning it computes
    ``password_digest`` and keeps the plaintext in memory only until the
    record is saved. Records loaded from the database never expose it.

    ``groups`` appends create memberships directly. Save them through
    ``persist`` (or use ``add_user_to_group``) to get a duplicate pair back as
    a field error; a bare ``commit`` raises ``IntegrityError``.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("index_users_on_email", "email", unique=True),
        Index("index_users_on_access_token", "access_token", unique=True),
        Index("index_users_on_token", "token", unique=True),
        CheckConstraint("email = lower(email)", name="ck_users_email_lowercase"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)  # always stored lower-cased
    password_digest = Column(String(255), nullable=False)
    access_token = Column(String(255), nullable=True)
    token = Column(String(255), nullable=True)
    preferences = Column(
        MutableDict.as_mutable(JSON().with_variant(JSONB(), "postgresql")),
        nullable=False,
        default=dict,
        server_default=text("'{}'"),
    )

    # Relationships
    memberships = relationship(
        "GroupMembership",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    groups = association_proxy(
        "memberships", "group", creator=lambda group: GroupMembership(group=group)
    )

    def __init__(self, **kwargs):
        kwargs.setdefault("preferences", {})
        super().__init__(**kwargs)

    @property
    def password(self) -> str | None:
        """Pending plaintext password, ``None`` once saved or when loaded."""
        return getattr(self, "_password", None)

    @password.setter
    def password(self, plaintext: str | None) -> None:
        self.set_password(plaintext)

    def set_password(self, plaintext: str | None) -> None:
        """Digest ``plaintext`` and hold it until the next save.

        A blank value clears the pending password and leaves the stored
        digest untouched.
        """
        from src.services.auth import get_password_hash

        if not plaintext:
            self._password = None
            return
        self._password = plaintext
        self.password_digest = get_password_hash(plaintext)

    def discard_password(self) -> None:
        """Forget the pending plaintext password."""
        self._password = None

    def authenticate(self, candidate: str | None) -> "User | bool":
        """Return this user if ``candidate`` matches the digest, else False."""
        from src.services.auth import verify_password

        if verify_password(candidate, self.password_digest):
            return self
        return False

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
