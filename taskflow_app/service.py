"""
Task mutations and statistics.

Every id-based operation loads the task first and checks existence before
ownership: a missing task raises ``NotFound`` and a task owned by someone
else raises ``Forbidden``.  Updates follow ``UPDATE_POLICIES``, a per-field
table that decides whether an incoming value replaces the stored one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from .errors import Forbidden, NotFound, ValidationError
from .models import Task, TaskPriority, TaskStatus, ensure_utc, utc_now
from .store import TaskStore

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200


class UpdatePolicy(str, Enum):
    """How an update request treats one field."""

    # Absent or falsy values leave the stored value alone.
    KEEP_IF_FALSY = "keep_if_falsy"
    # Any value present in the body is applied, including null and "".
    APPLY_IF_PRESENT = "apply_if_present"


# =====================================================================
# Field validation
# =====================================================================


def _clean_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Please add a title")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be {TITLE_MAX_LENGTH} characters or less")
    return value


def _clean_description(value: Any) -> str | None:
    if value is not None and not isinstance(value, str):
        raise ValidationError("Description must be a string")
    return value


def _clean_status(value: Any) -> str:
    valid_statuses = [s.value for s in TaskStatus]
    if value not in valid_statuses:
        raise ValidationError(f"Invalid status. Must be one of: {valid_statuses}")
    return value


def _clean_priority(value: Any) -> str:
    valid_priorities = [p.value for p in TaskPriority]
    if value not in valid_priorities:
        raise ValidationError(f"Invalid priority. Must be one of: {valid_priorities}")
    return value


def parse_due_date(value: Any) -> datetime | None:
    """
    Parse an optional ISO-8601 string into a UTC datetime.

    ``None`` and ``""`` mean "no due date".

    Raises:
        ValidationError: If the value is not a parseable ISO-8601 string.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError("Invalid dueDate format. Use ISO 8601")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        # Offsets at the edges of the calendar cannot be shifted to UTC.
        return ensure_utc(parsed)
    except (ValueError, OverflowError) as exc:
        raise ValidationError("Invalid dueDate format. Use ISO 8601") from exc


# body key -> (model attribute, policy, cleaner)
UPDATE_POLICIES: dict[str, tuple[str, UpdatePolicy, Callable[[Any], Any]]] = {
    "title": ("title", UpdatePolicy.KEEP_IF_FALSY, _clean_title),
    "description": ("description", UpdatePolicy.APPLY_IF_PRESENT, _clean_description),
    "status": ("status", UpdatePolicy.KEEP_IF_FALSY, _clean_status),
    "priority": ("priority", UpdatePolicy.KEEP_IF_FALSY, _clean_priority),
    "dueDate": ("due_date", UpdatePolicy.APPLY_IF_PRESENT, parse_due_date),
}


def resolve_updates(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Apply ``UPDATE_POLICIES`` to a request body.

    Returns:
        Model attribute names mapped to the validated values that should be
        written.  Fields the policies say to keep are left out.
    """
    changes: dict[str, Any] = {}
    for key, (attribute, policy, clean) in UPDATE_POLICIES.items():
        if key not in payload:
            continue
        value = payload[key]
        if policy is UpdatePolicy.KEEP_IF_FALSY and not value:
            continue
        changes[attribute] = clean(value)
    return changes


def _require_object(payload: Any) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _next_timestamp(previous: datetime | None) -> datetime:
    """Current UTC time, nudged past *previous* if the clock has not moved."""
    now = utc_now()
    if previous is not None:
        previous = ensure_utc(previous)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
    return now


# =====================================================================
# Operations
# =====================================================================


def get_task(store: TaskStore, user_id: int, task_id: int, action: str = "access") -> Task:
    """
    Load a task on behalf of *user_id*.

    *action* names the operation in the ownership failure message, for
    example "Not authorized to update this task".

    Raises:
        NotFound: If no task has this id.
        Forbidden: If the task belongs to another user.
    """
    task = store.get(task_id)
    if task is None:
        raise NotFound("Task not found")
    if task.user_id != user_id:
        logger.warning("user_id=%s denied access to task %s", user_id, task_id)
        raise Forbidden(f"Not authorized to {action} this task")
    return task


def create_task(store: TaskStore, user_id: int, payload: Any) -> Task:
    """
    Create a pending task owned by *user_id*.

    Only ``title``, ``description``, ``priority`` and ``dueDate`` are read
    from the payload; identity, status and timestamps are server-assigned.

    Raises:
        ValidationError: If the title is missing or blank, or another
            supplied field is invalid.  Nothing is persisted in that case.
    """
    data = _require_object(payload)
    now = utc_now()
    task = Task(
        user_id=user_id,
        title=_clean_title(data.get("title")),
        description=_clean_description(data.get("description")),
        status=TaskStatus.PENDING.value,
        priority=_clean_priority(data.get("priority") or TaskPriority.MEDIUM.value),
        due_date=parse_due_date(data.get("dueDate")),
        created_at=now,
        updated_at=now,
    )
    store.add(task)
    logger.info("Created task %s for user_id=%s", task.id, user_id)
    return task


def update_task(store: TaskStore, user_id: int, task_id: int, payload: Any) -> Task:
    """
    Partially update a task; ``updatedAt`` moves forward even with no changes.

    Raises:
        NotFound, Forbidden: See ``get_task``.
        ValidationError: If a supplied value is invalid.
    """
    task = get_task(store, user_id, task_id, action="update")
    changes = resolve_updates(_require_object(payload))
    for attribute, value in changes.items():
        setattr(task, attribute, value)
    task.updated_at = _next_timestamp(task.updated_at)
    store.save(task)
    logger.info("Updated task %s fields=%s", task_id, sorted(changes))
    return task


def delete_task(store: TaskStore, user_id: int, task_id: int) -> None:
    task = get_task(store, user_id, task_id, action="delete")
    store.delete(task)
    logger.info("Deleted task %s", task_id)


def toggle_task(store: TaskStore, user_id: int, task_id: int) -> Task:
    """Flip a task between ``pending`` and ``completed``."""
    task = get_task(store, user_id, task_id, action="update")
    task.status = TaskStatus(task.status).toggled().value
    task.updated_at = _next_timestamp(task.updated_at)
    store.save(task)
    logger.info("Toggled task %s to %s", task_id, task.status)
    return task


def task_stats(store: TaskStore, user_id: int) -> dict[str, int]:
    """
    Per-status counts for one user.

    Uses a single grouped count plus a total count; a status with no tasks
    reports 0.
    """
    counts = store.status_counts(user_id)
    return {
        "total": store.count_for_user(user_id),
        "pending": counts.get(TaskStatus.PENDING.value, 0),
        "completed": counts.get(TaskStatus.COMPLETED.value, 0),
    }
