"""
Task store handle.

Wraps the Flask-SQLAlchemy session behind the handful of operations the
task services need.  One ``TaskStore`` is created per application in
``create_app`` and kept in ``app.extensions["task_store"]``; route handlers
fetch it with ``get_store()`` and pass it into the query and mutation
functions explicitly.
"""

from __future__ import annotations

import logging

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Select, func, select

from .models import Task

logger = logging.getLogger(__name__)

# Largest value an SQL INTEGER (signed 64-bit) can bind.
MAX_SQL_INTEGER = 2**63 - 1


class TaskStore:
    """Persistence operations for ``Task`` rows."""

    def __init__(self, database: SQLAlchemy) -> None:
        self._db = database

    def connect(self) -> None:
        """Create any missing tables.  Must run inside an app context."""
        self._db.create_all()
        logger.info("Task store connected, tables ensured")

    def close(self) -> None:
        """Drop the scoped session and release pooled connections."""
        self._db.session.remove()
        self._db.engine.dispose()
        logger.info("Task store closed")

    def get(self, task_id: int) -> Task | None:
        if not 0 < task_id <= MAX_SQL_INTEGER:
            return None
        return self._db.session.get(Task, task_id)

    def add(self, task: Task) -> Task:
        self._db.session.add(task)
        self._db.session.commit()
        return task

    def save(self, task: Task) -> Task:
        self._db.session.commit()
        return task

    def delete(self, task: Task) -> None:
        self._db.session.delete(task)
        self._db.session.commit()

    def count(self, stmt: Select) -> int:
        """Count the rows a ``select(Task)`` statement would return."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        return self._db.session.scalar(count_stmt) or 0

    def fetch_page(self, stmt: Select, skip: int, limit: int) -> list[Task]:
        """
        Fetch one window of *stmt*.

        An offset beyond what the database can bind is past every row, so it
        yields an empty list; an oversized limit is clamped.
        """
        if skip > MAX_SQL_INTEGER:
            return []
        limit = min(limit, MAX_SQL_INTEGER)
        return list(self._db.session.scalars(stmt.offset(skip).limit(limit)).all())

    def count_for_user(self, user_id: int) -> int:
        return self.count(select(Task).where(Task.user_id == user_id))

    def status_counts(self, user_id: int) -> dict[str, int]:
        """Grouped count of a user's tasks keyed by status."""
        stmt = (
            select(Task.status, func.count(Task.id))
            .where(Task.user_id == user_id)
            .group_by(Task.status)
        )
        return {status: count for status, count in self._db.session.execute(stmt)}


def get_store() -> TaskStore:
    """Return the store handle bound to the current application."""
    return current_app.extensions["task_store"]


def close_store(app: Flask) -> None:
    """Shutdown hook: close the application's store inside its context."""
    with app.app_context():
        app.extensions["task_store"].close()
