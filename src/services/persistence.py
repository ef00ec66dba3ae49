"""Commit helpers that turn storage constraint failures into field errors."""

import logging
import re

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.interfaces import MANYTOONE

from src.schemas.errors import (
    Errors,
    FieldError,
    FormatError,
    PresenceError,
    UniquenessError,
)

logger = logging.getLogger(__name__)

# Unique index names (PostgreSQL) and table.column pairs (SQLite) mapped to the
# field that owns them. Composite keys come first so they win over prefixes.
UNIQUE_FIELDS: list[tuple[str, str]] = [
    ("index_group_memberships_on_user_id_and_group_id", "group"),
    ("group_memberships.user_id, group_memberships.group_id", "group"),
    ("index_users_on_email", "email"),
    ("users.email", "email"),
    ("index_users_on_access_token", "access_token"),
    ("users.access_token", "access_token"),
    ("index_users_on_token", "token"),
    ("users.token", "token"),
    ("index_groups_on_name", "name"),
    ("groups.name", "name"),
    ("index_groups_on_slug", "slug"),
    ("groups.slug", "slug"),
]

CHECK_FIELDS: dict[str, str] = {
    "ck_users_email_lowercase": "email",
}

# SQLite: "NOT NULL constraint failed: users.name"
# PostgreSQL: 'null value in column "name" of relation "users"'
NOT_NULL_PATTERN = re.compile(
    r'NOT NULL constraint failed: \w+\.(\w+)|null value in column "(\w+)"'
)
FOREIGN_KEY_MARKERS = ("FOREIGN KEY constraint failed", "violates foreign key constraint")


def constraint_error(exc: IntegrityError) -> FieldError | None:
    """Field error for a unique, check or not-null failure, else None."""
    message = str(exc.orig)

    if "UNIQUE constraint failed" in message or "duplicate key value" in message:
        for marker, field in UNIQUE_FIELDS:
            if marker in message:
                return UniquenessError(field=field)
        return UniquenessError(field="base")

    for marker, field in CHECK_FIELDS.items():
        if marker in message:
            return FormatError(field=field)

    match = NOT_NULL_PATTERN.search(message)
    if match:
        return PresenceError(field=match.group(1) or match.group(2))

    return None


def _references(record) -> list[tuple[str, type, object]]:
    """(relationship, target class, key value) for each many-to-one of ``record``."""
    references = []
    for relationship in inspect(record).mapper.relationships:
        if relationship.direction is not MANYTOONE:
            continue
        (column,) = relationship.local_columns
        value = getattr(record, column.key)
        references.append((relationship.key, relationship.mapper.class_, value))
    return references


def _missing_references(db: Session, references) -> Errors:
    errors = Errors()
    for field, target, value in references:
        if value is not None and db.get(target, value) is None:
            errors.add(PresenceError(field=field))
    return errors


def persist(db: Session, record) -> Errors:
    """Add ``record`` to the session and commit it.

    A constraint violation rolls the transaction back and comes back as field
    errors instead of propagating: unique indexes as UniquenessError, the
    lowercase email check as FormatError, missing values or referenced rows
    as PresenceError.
    """
    references = _references(record)
    db.add(record)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Constraint violation saving {type(record).__name__}: {e.orig}")

        message = str(e.orig)
        if any(marker in message for marker in FOREIGN_KEY_MARKERS):
            errors = _missing_references(db, references)
            return errors or Errors([PresenceError(field="base")])

        error = constraint_error(e)
        return Errors([error or FieldError(field="base", message="could not be saved")])
    db.refresh(record)
    return Errors()


def discard_changes(db: Session, record) -> None:
    """Drop unsaved changes so a later commit cannot write them."""
    state = inspect(record)
    if state.persistent:
        db.expire(record)
    elif state.pending:
        db.expunge(record)
