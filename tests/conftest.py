"""Pytest configuration and fixtures."""

import os

# Cheap hashing for tests; must be set before src.config is first imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src import models  # noqa: F401
from src.database import Base
from src.services.auth import create_user
from src.services.groups import create_group

# Use test database - PostgreSQL when DATABASE_URL is set, SQLite locally
if os.getenv("DATABASE_URL", "").startswith("postgresql"):
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/memberships", "/memberships_test"
    )
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def user(db):
    """A saved user with password "password"."""
    user, errors = create_user(db, name="Alice", email="hello@world.com", password="password")
    assert not errors
    return user


@pytest.fixture
def group(db):
    """A saved group named IHOP."""
    group, errors = create_group(db, name="IHOP")
    assert not errors
    return group


@pytest.fixture
def other_session():
    """A second session, for reading back what another session committed."""
    session = TestingSessionLocal()
    yield session
    session.close()
