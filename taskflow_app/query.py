"""
Task listing queries.

Translates the list endpoint's query-string parameters into a ``TaskQuery``
(filters, sort and pagination window) and runs it against the task store.
Every statement built here is scoped to a single owner.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select, or_, select

from .errors import ValidationError
from .models import Task
from .store import TaskStore

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_FIELD = "createdAt"
FILTER_ALL = "all"

# Only these fields may be used as a sort key; anything else is rejected.
SORTABLE_FIELDS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
}

LIKE_ESCAPE = "\\"


def _positive_int(raw: Any, default: int) -> int:
    """Parse a query-string integer, falling back to *default* when unusable."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _escape_like(text: str) -> str:
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class TaskQuery:
    """
    Resolved filter, sort and pagination window for a task listing.

    Attributes:
        page: 1-based page number.
        limit: Page size.
        search: Case-insensitive substring matched against title or
            description.
        status: Status filter; ``None`` or ``"all"`` disables it.
        priority: Priority filter; ``None`` or ``"all"`` disables it.
        sort_by: Key of ``SORTABLE_FIELDS``.
        sort_order: ``"asc"`` or ``"desc"``.
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: str | None = None
    status: str | None = None
    priority: str | None = None
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "desc"

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> TaskQuery:
        """
        Build a query from request arguments.

        ``page`` and ``limit`` fall back to their defaults when missing,
        non-numeric or below 1.  Without ``sortBy`` the listing is newest
        first regardless of ``sortOrder``.

        Raises:
            ValidationError: If ``sortBy`` names a field outside
                ``SORTABLE_FIELDS``.
        """
        sort_by = args.get("sortBy")
        if sort_by:
            if sort_by not in SORTABLE_FIELDS:
                allowed = ", ".join(SORTABLE_FIELDS)
                raise ValidationError(f"Invalid sortBy. Must be one of: {allowed}")
            sort_order = "asc" if args.get("sortOrder") == "asc" else "desc"
        else:
            sort_by = DEFAULT_SORT_FIELD
            sort_order = "desc"

        return cls(
            page=_positive_int(args.get("page"), DEFAULT_PAGE),
            limit=_positive_int(args.get("limit"), DEFAULT_LIMIT),
            search=args.get("search") or None,
            status=args.get("status") or None,
            priority=args.get("priority") or None,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def statement(self, user_id: int) -> Select:
        """Return the owner-scoped, filtered and ordered ``select(Task)``."""
        stmt = select(Task).where(Task.user_id == user_id)

        if self.search:
            pattern = f"%{_escape_like(self.search)}%"
            stmt = stmt.where(
                or_(
                    Task.title.ilike(pattern, escape=LIKE_ESCAPE),
                    Task.description.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        if self.status and self.status != FILTER_ALL:
            stmt = stmt.where(Task.status == self.status)

        if self.priority and self.priority != FILTER_ALL:
            stmt = stmt.where(Task.priority == self.priority)

        column = SORTABLE_FIELDS[self.sort_by]
        # id breaks ties so pages never overlap or skip rows.
        if self.sort_order == "asc":
            return stmt.order_by(column.asc(), Task.id.asc())
        return stmt.order_by(column.desc(), Task.id.desc())


@dataclass
class TaskPage:
    """One page of a task listing plus the totals needed to page through it."""

    tasks: list[Task] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0

    @property
    def total_pages(self) -> int:
        # Integer ceiling division, exact for any limit.
        return -(-self.total // self.limit)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [task.to_dict() for task in self.tasks],
            "currentPage": self.page,
            "totalPages": self.total_pages,
            "totalTasks": self.total,
        }


def list_tasks(store: TaskStore, user_id: int, query: TaskQuery) -> TaskPage:
    """
    Run *query* for *user_id*.

    The total ignores pagination; a page past the end yields an empty list.
    """
    stmt = query.statement(user_id)
    total = store.count(stmt)
    tasks = store.fetch_page(stmt, query.skip, query.limit)
    return TaskPage(tasks=tasks, page=query.page, limit=query.limit, total=total)
