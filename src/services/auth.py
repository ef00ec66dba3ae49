"""Authentication service: password digests and user persistence."""

import logging
import secrets
from typing import Any

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User
from src.schemas.errors import Errors
from src.services.persistence import discard_changes, persist
from src.services.validation import normalize_email, validate_user

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

TOKEN_ATTRIBUTES = ("token", "access_token")


def verify_password(plain_password: str | None, hashed_password: str | None) -> bool:
    """Verify a password against its hash.

    Malformed input never raises; it simply does not match.
    """
    if not isinstance(plain_password, str) or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_token() -> str:
    """Random URL-safe opaque token, 24 characters long."""
    return secrets.token_urlsafe(18)


def get_user_by_email(db: Session, email: str | None) -> User | None:
    """Get a user by email, ignoring case."""
    normalized = normalize_email(email)
    if not normalized:
        return None
    return db.query(User).filter(User.email == normalized).first()


def get_user_by_token(db: Session, token: str) -> User | None:
    return db.query(User).filter(User.token == token).first()


def get_user_by_access_token(db: Session, access_token: str) -> User | None:
    return db.query(User).filter(User.access_token == access_token).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        logger.debug("Authentication failed: unknown email")
        return None
    if not user.authenticate(password):
        logger.debug(f"Authentication failed for user {user.id}")
        return None
    return user


def save_user(db: Session, user: User, *, password_required: bool) -> Errors:
    """Normalize, validate and persist a user.

    ``password_required`` is True when this save sets the password. The
    pending plaintext password is discarded either way. A rejected save also
    drops the unsaved changes of a stored user so no later commit writes them.
    """
    user.email = normalize_email(user.email)

    errors = validate_user(db, user, password_required=password_required)
    if errors:
        logger.warning(f"Rejected user save: {errors.full_messages()}")
        discard_changes(db, user)
        user.discard_password()
        return errors

    is_new = user.id is None
    errors = persist(db, user)
    if errors:
        user.discard_password()
        return errors

    user.discard_password()
    logger.info(f"{'Created' if is_new else 'Updated'} user {user.id}")
    return errors


def create_user(
    db: Session,
    *,
    name: str | None,
    email: str | None,
    password: str | None,
    preferences: dict[str, Any] | None = None,
) -> tuple[User, Errors]:
    """Create a new user. A password is always required."""
    user = User(name=name, email=email, preferences=dict(preferences or {}))
    user.password = password
    errors = save_user(db, user, password_required=True)
    return user, errors


def update_user(
    db: Session,
    user: User,
    *,
    password: str | None = None,
    name: str | None = None,
    email: str | None = None,
    preferences: dict[str, Any] | None = None,
) -> Errors:
    """Update a user. The password is only checked when a new one is given."""
    if name is not None:
        user.name = name
    if email is not None:
        user.email = email
    if preferences is not None:
        user.preferences = dict(preferences)

    password_required = password is not None
    if password_required:
        user.password = password

    return save_user(db, user, password_required=password_required)


def regenerate_token(db: Session, user: User, attribute: str = "token") -> Errors:
    """Assign a fresh random value to ``token`` or ``access_token``."""
    if attribute not in TOKEN_ATTRIBUTES:
        raise ValueError(f"Unknown token attribute: {attribute}")
    setattr(user, attribute, generate_token())
    return save_user(db, user, password_required=False)


def delete_user(db: Session, user: User) -> None:
    """Delete a user; the database removes its memberships."""
    user_id = user.id
    db.delete(user)
    db.commit()
    logger.info(f"Deleted user {user_id}")
