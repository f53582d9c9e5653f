"""
Shared pytest fixtures for the Taskflow test suite.

Provides the Flask application, test client, database session, users with
bearer tokens, and Faker-backed factories used by the unit, integration
and security suites.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest
from faker import Faker

# Set testing environment before importing the app
os.environ["FLASK_ENV"] = "testing"

from taskflow_app import create_app, db
from taskflow_app.models import Task, TaskPriority, TaskStatus, User
from taskflow_app.store import close_store, get_store
from tests.helpers import auth_headers, create_test_token

fake = Faker()

_RANDOM = object()

TEST_PASSWORD = "correct-horse-battery"


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def app():
    """
    Provide the Flask application for the whole test session.

    The store is closed once the session ends, exercising the same
    shutdown hook ``wsgi.py`` registers.
    """
    application = create_app("testing")
    yield application
    close_store(application)


@pytest.fixture(scope="function")
def client(app):
    """Provide a fresh test client for every test."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="function")
def db_session(app):
    """
    Provide a clean database for each test.

    Creates all tables before the test, then rolls back any uncommitted
    changes and drops every table afterwards.
    """
    with app.app_context():
        db.create_all()
        yield db
        db.session.rollback()
        db.drop_all()


@pytest.fixture
def store(db_session):
    """The application's task store, inside an active app context."""
    return get_store()


# -----------------------------------------------------------------------------
# Users and Tokens
# -----------------------------------------------------------------------------


@pytest.fixture
def user_factory(db_session):
    """
    Factory fixture that inserts ``User`` rows.

    Every user gets the password ``TEST_PASSWORD`` unless one is given.
    """

    def _create_user(
        *,
        name: str | None = None,
        email: str | None = None,
        password: str = TEST_PASSWORD,
    ) -> User:
        user = User(
            name=name or fake.name(),
            email=(email or fake.unique.email()).lower(),
        )
        user.set_password(password)
        db_session.session.add(user)
        db_session.session.commit()
        return user

    return _create_user


@pytest.fixture
def user_one(user_factory) -> User:
    return user_factory(name="User One", email="user.one@example.com")


@pytest.fixture
def user_two(user_factory) -> User:
    return user_factory(name="User Two", email="user.two@example.com")


@pytest.fixture
def test_token(app, user_one) -> str:
    """A valid token for ``user_one``."""
    return create_test_token(user_one.id, secret=app.config["JWT_SECRET_KEY"])


@pytest.fixture
def second_user_token(app, user_two) -> str:
    """A valid token for ``user_two``, used in ownership tests."""
    return create_test_token(user_two.id, secret=app.config["JWT_SECRET_KEY"])


@pytest.fixture
def api_headers(test_token) -> dict[str, str]:
    return auth_headers(test_token)


@pytest.fixture
def second_user_headers(second_user_token) -> dict[str, str]:
    return auth_headers(second_user_token)


# -----------------------------------------------------------------------------
# Task Factories
# -----------------------------------------------------------------------------


@pytest.fixture
def task_factory(db_session, user_one):
    """
    Factory fixture that inserts ``Task`` rows.

    Tasks belong to ``user_one`` unless ``user`` is given.  ``created_at``
    may be passed to control ordering in sort tests.
    """

    def _create_task(
        *,
        user: User | None = None,
        title: str | None = None,
        description: str | None | object = _RANDOM,
        status: str = TaskStatus.PENDING.value,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> Task:
        created = created_at or datetime.now(timezone.utc)
        task = Task(
            user_id=(user or user_one).id,
            title=title or fake.sentence(nb_words=4),
            description=fake.paragraph() if description is _RANDOM else description,
            status=status,
            priority=priority,
            due_date=due_date,
            created_at=created,
            updated_at=created,
        )
        db_session.session.add(task)
        db_session.session.commit()
        return task

    return _create_task


@pytest.fixture
def sample_task(task_factory) -> Task:
    """A single pending task with predictable values owned by ``user_one``."""
    return task_factory(
        title="Sample Task",
        description="This is a sample task for testing",
        status=TaskStatus.PENDING.value,
        priority=TaskPriority.MEDIUM.value,
    )


@pytest.fixture
def multiple_tasks(task_factory) -> list[Task]:
    """
    Five tasks for ``user_one`` with distinct creation times.

    Created oldest first, so the default newest-first listing returns them
    in reverse order.
    """
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    specs = [
        ("Buy milk", "From the corner shop", TaskStatus.PENDING, TaskPriority.HIGH),
        ("Walk dog", "Around the park", TaskStatus.COMPLETED, TaskPriority.LOW),
        ("Write report", "Quarterly MILK sales", TaskStatus.PENDING, TaskPriority.MEDIUM),
        ("Call plumber", None, TaskStatus.COMPLETED, TaskPriority.HIGH),
        ("Book flights", "Summer holiday", TaskStatus.PENDING, TaskPriority.LOW),
    ]
    return [
        task_factory(
            title=title,
            description=description,
            status=status.value,
            priority=priority.value,
            due_date=base + timedelta(days=10 - offset),
            created_at=base + timedelta(hours=offset),
        )
        for offset, (title, description, status, priority) in enumerate(specs)
    ]
