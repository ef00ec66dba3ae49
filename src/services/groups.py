"""Group service: groups, slugs and memberships."""

import logging
import re

from sqlalchemy.orm import Session

from src.models.group import Group
from src.models.group_membership import GroupMembership
from src.models.user import User
from src.schemas.errors import Errors
from src.services.persistence import discard_changes, persist
from src.services.validation import validate_group, validate_membership

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    """URL-safe slug for a group name ("Pancake House" -> "pancake-house")."""
    slug = name.strip().lower().replace(" ", "-")
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def get_group_by_slug(db: Session, slug: str) -> Group | None:
    return db.query(Group).filter(Group.slug == slug).first()


def save_group(db: Session, group: Group) -> Errors:
    """Validate and persist a group. A rejected save drops its unsaved changes."""
    errors = validate_group(db, group)
    if errors:
        logger.warning(f"Rejected group save: {errors.full_messages()}")
        discard_changes(db, group)
        return errors

    is_new = group.id is None
    errors = persist(db, group)
    if not errors:
        logger.info(f"{'Created' if is_new else 'Updated'} group {group.id} ({group.slug})")
    return errors


def create_group(db: Session, *, name: str | None, slug: str | None = None) -> tuple[Group, Errors]:
    """Create a group, deriving the slug from the name when none is given."""
    if slug is None:
        slug = slugify(name or "")
    group = Group(name=name, slug=slug)
    return group, save_group(db, group)


def update_group(
    db: Session, group: Group, *, name: str | None = None, slug: str | None = None
) -> Errors:
    """Rename a group or change its slug. Renaming keeps the existing slug."""
    if name is not None:
        group.name = name
    if slug is not None:
        group.slug = slug
    return save_group(db, group)


def delete_group(db: Session, group: Group) -> None:
    """Delete a group; the database removes its memberships."""
    group_id = group.id
    db.delete(group)
    db.commit()
    logger.info(f"Deleted group {group_id}")


def get_membership(db: Session, user: User, group: Group) -> GroupMembership | None:
    return (
        db.query(GroupMembership)
        .filter(
            GroupMembership.user_id == user.id,
            GroupMembership.group_id == group.id,
        )
        .first()
    )


def add_user_to_group(
    db: Session, user: User, group: Group, *, accepted: bool | None = None
) -> tuple[GroupMembership | None, Errors]:
    """Create the membership joining ``user`` to ``group``.

    Returns ``(None, errors)`` when the pair already exists or either side
    has not been saved.
    """
    # Built from ids so a rejected membership never lands in either collection
    membership = GroupMembership(user_id=user.id, group_id=group.id, accepted=accepted)

    errors = validate_membership(db, membership)
    if not errors:
        errors = persist(db, membership)
    if errors:
        logger.warning(
            f"Rejected membership for user {user.id} in group {group.id}: "
            f"{errors.full_messages()}"
        )
        return None, errors

    logger.info(f"Added user {user.id} to group {group.id}")
    return membership, errors


def set_membership_accepted(
    db: Session, membership: GroupMembership, accepted: bool | None
) -> Errors:
    """Accept, decline, or reset a membership back to pending (None)."""
    membership.accepted = accepted
    errors = persist(db, membership)
    if not errors:
        logger.info(f"Membership {membership.id} accepted={accepted}")
    return errors


def remove_user_from_group(db: Session, user: User, group: Group) -> bool:
    """Delete the membership if there is one. Returns whether anything was removed."""
    membership = get_membership(db, user, group)
    if membership is None:
        return False
    db.delete(membership)
    db.commit()
    logger.info(f"Removed user {user.id} from group {group.id}")
    return True


def groups_for_user(db: Session, user: User, *, accepted: bool | None = None) -> list[Group]:
    """Groups the user belongs to, ordered by name.

    With ``accepted`` given, only memberships in that state are considered;
    otherwise accepted, declined and pending memberships all count.
    """
    query = (
        db.query(Group)
        .join(GroupMembership, GroupMembership.group_id == Group.id)
        .filter(GroupMembership.user_id == user.id)
    )
    if accepted is not None:
        query = query.filter(GroupMembership.accepted.is_(accepted))
    return query.order_by(Group.name).all()


def pending_memberships(db: Session, group: Group) -> list[GroupMembership]:
    """Memberships of ``group`` that have not been accepted or declined yet."""
    return (
        db.query(GroupMembership)
        .filter(
            GroupMembership.group_id == group.id,
            GroupMembership.accepted.is_(None),
        )
        .order_by(GroupMembership.created_at, GroupMembership.id)
        .all()
    )
