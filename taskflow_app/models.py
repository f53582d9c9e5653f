"""
Database Models for the Taskflow API.

Defines the SQLAlchemy ORM models for account holders (``User``) and their
tasks (``Task``), along with the enumerations used for task status and
priority.  Each task is scoped to exactly one user via ``user_id``, which
never changes after creation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalise a datetime to UTC.

    SQLite does not store timezone information, so values read back from
    the database may be naive even though they were written in UTC.  Naive
    datetimes are assumed UTC; aware ones are converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


class TaskStatus(str, Enum):
    """
    Enumeration of task statuses.

    Inherits from ``str`` so members compare equal to the raw strings stored
    in the database column and serialise directly to JSON.
    """

    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> TaskStatus:
        """Return the opposite status."""
        if self is TaskStatus.PENDING:
            return TaskStatus.COMPLETED
        return TaskStatus.PENDING


class TaskPriority(str, Enum):
    """Enumeration of task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class User(db.Model):
    """
    Account holder that owns tasks.

    Passwords are never stored in plain text; only a Werkzeug hash is
    persisted and ``to_dict`` leaves it out.

    Attributes:
        id: Auto-incrementing integer primary key.
        name: Display name.
        email: Unique, lower-cased login identifier.
        password_hash: Werkzeug-generated hash of the user's password.
        created_at: Timestamp of account creation (UTC).
    """

    __tablename__ = "users"

    id: int = db.Column(db.Integer, primary_key=True)
    name: str = db.Column(db.String(80), nullable=False)
    # Indexed because every login looks a user up by email.
    email: str = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": to_utc_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email}>"


class Task(db.Model):
    """
    Task owned by a single user.

    Attributes:
        id: Auto-incrementing primary key.
        user_id: The owning user.  Indexed for per-user queries and never
            reassigned after creation.
        title: Short summary of the task (max 200 characters).
        description: Optional longer text.
        status: ``pending`` or ``completed`` (see ``TaskStatus``).
        priority: Importance level (see ``TaskPriority``).
        due_date: Optional timezone-aware deadline.
        created_at: Timestamp of creation (UTC).
        updated_at: Timestamp of the last mutation (UTC).
    """

    __tablename__ = "tasks"

    id: int = db.Column(db.Integer, primary_key=True)
    user_id: int = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    title: str = db.Column(db.String(200), nullable=False)
    description: str | None = db.Column(db.Text, nullable=True)
    status: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskStatus.PENDING.value,
        index=True,
    )
    priority: str = db.Column(
        db.String(20),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
    )
    due_date: datetime | None = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    # Set explicitly by the mutation service so it can guarantee that each
    # mutation moves the timestamp forward.
    updated_at: datetime = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialise the task to its JSON wire representation.

        Returns:
            A dictionary with camelCase keys and datetimes as UTC ISO-8601
            strings.
        """
        return {
            "id": self.id,
            "user": self.user_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "dueDate": to_utc_iso(self.due_date),
            "createdAt": to_utc_iso(self.created_at),
            "updatedAt": to_utc_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Task {self.id}: {self.title}>"
