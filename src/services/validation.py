"""Field validation rules for users, groups and memberships.

Each ``validate_*`` function inspects a candidate record and returns an
:class:`~src.schemas.errors.Errors` collection; the record is valid when the
collection is empty. Nothing here writes to the session.
"""

import re

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.group import Group
from src.models.group_membership import GroupMembership
from src.models.user import User
from src.schemas.errors import (
    Errors,
    FormatError,
    LengthError,
    PresenceError,
    UniquenessError,
)

settings = get_settings()

SLUG_PATTERN = re.compile(r"\A[a-z0-9]+(?:-[a-z0-9]+)*\Z")

# bcrypt only looks at the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72


def is_blank(value: object) -> bool:
    """Check whether a value is None or whitespace-only."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_email(email: str | None) -> str | None:
    """Canonical form of an email address: stripped and lower-cased."""
    if email is None:
        return None
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Check the address syntax without any DNS lookups."""
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _is_taken(db: Session, model, column, value, exclude_id: int | None) -> bool:
    query = db.query(model.id).filter(column == value)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return db.query(query.exists()).scalar()


def validate_user(db: Session, user: User, *, password_required: bool) -> Errors:
    """Validate a user record.

    ``password_required`` says whether this save sets the password (creation
    or an explicit password change). When it is False a missing password is
    accepted.
    """
    errors = Errors()

    if is_blank(user.name):
        errors.add(PresenceError(field="name"))

    if is_blank(user.email):
        errors.add(PresenceError(field="email"))
    elif not is_valid_email(user.email):
        errors.add(FormatError(field="email"))
    elif _is_taken(db, User, User.email, normalize_email(user.email), user.id):
        errors.add(UniquenessError(field="email"))

    for attribute in ("access_token", "token"):
        value = getattr(user, attribute)
        if value is not None and _is_taken(db, User, getattr(User, attribute), value, user.id):
            errors.add(UniquenessError(field=attribute))

    password_errors = _validate_password(user.password, required=password_required)
    if not password_errors and is_blank(user.password_digest):
        password_errors.add(PresenceError(field="password"))
    errors.extend(password_errors)
    return errors


def _validate_password(password: str | None, *, required: bool) -> Errors:
    errors = Errors()
    if is_blank(password):
        if required:
            errors.add(PresenceError(field="password"))
        return errors

    if len(password) < settings.password_min_length:
        errors.add(LengthError.too_short("password", settings.password_min_length))
    elif len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors.add(LengthError.too_long("password", PASSWORD_MAX_BYTES, "bytes"))
    return errors


def validate_group(db: Session, group: Group) -> Errors:
    """Validate a group record. Name and slug uniqueness is case-sensitive."""
    errors = Errors()

    if is_blank(group.name):
        errors.add(PresenceError(field="name"))
    elif _is_taken(db, Group, Group.name, group.name, group.id):
        errors.add(UniquenessError(field="name"))

    if is_blank(group.slug):
        errors.add(PresenceError(field="slug"))
    elif not SLUG_PATTERN.match(group.slug):
        errors.add(FormatError(field="slug"))
    elif _is_taken(db, Group, Group.slug, group.slug, group.id):
        errors.add(UniquenessError(field="slug"))

    return errors


def validate_membership(db: Session, membership: GroupMembership) -> Errors:
    """Validate a membership; the (user, group) pair may exist only once."""
    errors = Errors()

    user_id = membership.user.id if membership.user is not None else membership.user_id
    group_id = membership.group.id if membership.group is not None else membership.group_id

    if membership.user is None and user_id is None:
        errors.add(PresenceError(field="user"))
    if membership.group is None and group_id is None:
        errors.add(PresenceError(field="group"))
    if errors or user_id is None or group_id is None:
        return errors

    query = db.query(GroupMembership.id).filter(
        GroupMembership.user_id == user_id,
        GroupMembership.group_id == group_id,
    )
    if membership.id is not None:
        query = query.filter(GroupMembership.id != membership.id)
    if db.query(query.exists()).scalar():
        errors.add(UniquenessError(field="group"))

    return errors
