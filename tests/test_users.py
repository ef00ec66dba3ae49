"""User validation and persistence tests."""

from src.models.user import User
from src.schemas import LengthError, UserResponse, UserUpdate
from src.services.auth import create_user, save_user, update_user
from src.services.groups import add_user_to_group, create_group


def test_invalid_without_name(db):
    """Test that a user needs a name."""
    user, errors = create_user(db, name=None, email="amy@alice.com", password="some valid password")
    assert errors
    assert "can't be blank" in errors["name"]
    assert user.id is None


def test_invalid_with_blank_name(db):
    """Test that a whitespace-only name counts as blank."""
    _, errors = create_user(db, name="   ", email="amy@alice.com", password="some valid password")
    assert "can't be blank" in errors["name"]


def test_invalid_without_email(db):
    """Test that a user needs an email."""
    _, errors = create_user(db, name="Alice", email=None, password="some valid password")
    assert "can't be blank" in errors["email"]


def test_invalid_email_format(db):
    """Test that a malformed email is rejected."""
    _, errors = create_user(db, name="Alice", email="helloworld.com", password="password")
    assert errors["email"] == ["is invalid"]


def test_downcases_email_before_saving(db, other_session):
    """Test that emails are stored lower-cased."""
    user, errors = create_user(db, name="Alice", email="HELLO@WORLD.COM", password="password")
    assert not errors
    assert user.email == "hello@world.com"

    reloaded = other_session.query(User).filter_by(id=user.id).one()
    assert reloaded.email == "hello@world.com"


def test_invalid_when_email_not_unique(db, user):
    """Test that a second user with the same email is rejected."""
    user2, errors = create_user(db, name="Alice", email="hello@world.com", password="password")
    assert errors["email"] == ["has already been taken"]
    assert user2.id is None
    assert db.query(User).count() == 1


def test_email_uniqueness_ignores_case(db, user):
    """Test that email uniqueness is case-insensitive."""
    _, errors = create_user(db, name="Eve", email="Hello@World.com", password="password")
    assert errors["email"] == ["has already been taken"]


def test_invalid_without_password(db):
    """Test that a new user needs a password."""
    _, errors = create_user(db, name="Alice", email="hello@world.com", password=None)
    assert errors["password"] == ["can't be blank"]


def test_invalid_with_blank_password(db):
    """Test that an empty password counts as missing."""
    _, errors = create_user(db, name="Alice", email="hello@world.com", password="")
    assert errors["password"] == ["can't be blank"]


def test_invalid_when_password_short(db):
    """Test the minimum password length."""
    _, errors = create_user(db, name="Alice", email="hello@world.com", password="123")
    assert "is too short (minimum is 8 characters)" in errors["password"]
    assert errors.of_type("password", LengthError)


def test_invalid_when_password_too_long(db):
    """Test that passwords beyond the bcrypt input limit are rejected."""
    _, errors = create_user(db, name="Alice", email="hello@world.com", password="x" * 73)
    assert errors["password"] == ["is too long (maximum is 72 bytes)"]


def test_password_limit_counts_bytes(db):
    """Test that the upper bound is measured in UTF-8 bytes."""
    _, errors = create_user(db, name="Alice", email="hello@world.com", password="\u00e9" * 40)
    assert errors["password"] == ["is too long (maximum is 72 bytes)"]

    _, errors = create_user(db, name="Alice", email="hello@world.com", password="\u00e9" * 36)
    assert not errors


def test_collects_every_error(db):
    """Test that all failing fields are reported together."""
    _, errors = create_user(db, name="", email="nope", password="123")
    assert set(e["field"] for e in errors.as_list()) == {"name", "email", "password"}


def test_timestamps_are_set(db, user):
    """Test that timestamps are managed by the database."""
    assert user.created_at is not None
    assert user.updated_at is not None
    assert user.updated_at >= user.created_at


def test_update_does_not_require_password(db, user, other_session):
    """Test that updating without a password keeps the old one."""
    errors = update_user(db, user, email="goodbye@world.com")
    assert not errors

    reloaded = other_session.query(User).filter_by(id=user.id).one()
    assert reloaded.email == "goodbye@world.com"
    assert reloaded.authenticate("password") == reloaded


def test_update_with_short_password_fails(db, user):
    """Test that a newly supplied password is still validated."""
    errors = update_user(db, user, password="short")
    assert errors["password"] == ["is too short (minimum is 8 characters)"]


def test_update_with_empty_password_fails(db, user):
    """Test that explicitly supplying an empty password is rejected."""
    errors = update_user(db, user, password="")
    assert errors["password"] == ["can't be blank"]


def test_update_changes_password(db, user):
    """Test that a new password replaces the old one."""
    errors = update_user(db, user, password="new password")
    assert not errors
    assert user.authenticate("new password") == user
    assert user.authenticate("password") is False


def test_update_from_schema(db, user):
    """Test that a partial update schema only touches supplied fields."""
    payload = UserUpdate(name="Alicia")
    errors = update_user(db, user, **payload.model_dump(exclude_unset=True))
    assert not errors
    assert user.name == "Alicia"
    assert user.email == "hello@world.com"


def test_save_without_digest_requires_password(db):
    """Test that a record with no digest cannot skip the password check."""
    user = User(name="Alice", email="hello@world.com")
    errors = save_user(db, user, password_required=False)
    assert errors["password"] == ["can't be blank"]


def test_preferences_default_to_empty(db, user):
    """Test that preferences start out empty."""
    assert User(name="Bob").preferences == {}
    assert user.preferences == {}


def test_user_can_add_preferences(db, user, other_session):
    """Test that in-place preference changes are persisted."""
    user.preferences["tea"] = "chai"
    errors = save_user(db, user, password_required=False)
    assert not errors

    reloaded = other_session.query(User).filter_by(id=user.id).one()
    assert reloaded.preferences == {"tea": "chai"}


def test_preferences_update_merges(db, user):
    """Test that dict-style update on preferences is tracked."""
    user.preferences.update({"tea": "chai", "theme": "dark"})
    save_user(db, user, password_required=False)
    user.preferences.update({"tea": "sencha"})
    save_user(db, user, password_required=False)

    db.expire_all()
    assert user.preferences == {"tea": "sencha", "theme": "dark"}


def test_response_schema_hides_credentials(user):
    """Test that the response schema never exposes password fields."""
    data = UserResponse.model_validate(user).model_dump()
    assert data["email"] == "hello@world.com"
    assert "password" not in data
    assert "password_digest" not in data


def test_rejected_password_change_is_not_written_later(db, user, group, other_session):
    """Test that a rejected password change cannot leak out with a later commit."""
    errors = update_user(db, user, password="short")
    assert errors["password"] == ["is too short (minimum is 8 characters)"]

    _, errors = add_user_to_group(db, user, group)
    assert not errors

    reloaded = other_session.query(User).filter_by(id=user.id).one()
    assert reloaded.authenticate("password") == reloaded
    assert reloaded.authenticate("short") is False


def test_rejected_update_is_not_written_later(db, user, other_session):
    """Test that a rejected email and name change leaves the stored row alone."""
    errors = update_user(db, user, email="not-an-email", name="")
    assert errors["email"] == ["is invalid"]
    assert errors["name"] == ["can't be blank"]

    _, errors = create_group(db, name="Book Club")
    assert not errors

    reloaded = other_session.query(User).filter_by(id=user.id).one()
    assert reloaded.email == "hello@world.com"
    assert reloaded.name == "Alice"
    assert user.email == "hello@world.com"
    assert user.password is None


def test_rejected_preferences_change_is_dropped(db, user, other_session):
    """Test that in-place preference edits on a rejected save are dropped too."""
    user.preferences["tea"] = "chai"
    user.name = ""
    errors = save_user(db, user, password_required=False)
    assert errors["name"] == ["can't be blank"]

    db.commit()
    reloaded = other_session.query(User).filter_by(id=user.id).one()
    assert reloaded.preferences == {}
    assert reloaded.name == "Alice"
