"""
REST API Endpoints for tasks.

Every task endpoint is protected by ``require_auth`` and works only on the
authenticated user's tasks.  ``/tasks/stats`` is registered before the
id-based routes and, since ids are integers, can never be shadowed by one.

Endpoints:
    GET    /api/health                  - Liveness check (public)
    GET    /api/tasks                   - List, filter, sort and paginate
    GET    /api/tasks/stats             - Per-status counts
    GET    /api/tasks/<id>              - Retrieve a single task
    POST   /api/tasks                   - Create a task
    PUT    /api/tasks/<id>              - Partially update a task
    DELETE /api/tasks/<id>              - Delete a task
    PATCH  /api/tasks/<id>/toggle       - Flip pending/completed
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, g, jsonify, request

from ..auth import require_auth
from ..query import TaskQuery, list_tasks
from ..service import (
    create_task,
    delete_task,
    get_task,
    task_stats,
    toggle_task,
    update_task,
)
from ..store import get_store

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health_check() -> tuple[Response, int]:
    """Public liveness probe with a fixed payload."""
    return jsonify({"status": "ok", "message": "Server is running"}), 200


@api_bp.route("/tasks", methods=["GET"])
@require_auth
def get_tasks() -> tuple[Response, int]:
    """
    List the authenticated user's tasks.

    Query Parameters:
        page, limit: Pagination window (defaults 1 and 10).
        search: Case-insensitive match on title or description.
        status, priority: Exact filters; ``all`` disables them.
        sortBy, sortOrder: Sort field and ``asc``/``desc``.

    Returns:
        JSON object with ``tasks``, ``currentPage``, ``totalPages`` and
        ``totalTasks``.
    """
    query = TaskQuery.from_args(request.args)
    logger.info("GET /api/tasks - user_id=%s query=%s", g.user_id, query)
    page = list_tasks(get_store(), g.user_id, query)
    return jsonify(page.to_dict()), 200


@api_bp.route("/tasks/stats", methods=["GET"])
@require_auth
def get_task_stats() -> tuple[Response, int]:
    return jsonify(task_stats(get_store(), g.user_id)), 200


@api_bp.route("/tasks/<int:task_id>", methods=["GET"])
@require_auth
def get_one_task(task_id: int) -> tuple[Response, int]:
    task = get_task(get_store(), g.user_id, task_id)
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks", methods=["POST"])
@require_auth
def create_one_task() -> tuple[Response, int]:
    """
    Create a task for the authenticated user.

    Request Body (JSON):
        title: Task title (required)
        description: Task description (optional)
        priority: low, medium or high (optional, default: medium)
        dueDate: Due date in ISO format (optional)

    Returns:
        The created task with a 201 status.
    """
    task = create_task(get_store(), g.user_id, request.get_json(silent=True))
    return jsonify(task.to_dict()), 201


@api_bp.route("/tasks/<int:task_id>", methods=["PUT"])
@require_auth
def update_one_task(task_id: int) -> tuple[Response, int]:
    """
    Update a task; fields left out of the body keep their values.

    ``title``, ``status`` and ``priority`` are only replaced by non-empty
    values, while ``description`` and ``dueDate`` are replaced whenever the
    key is present.
    """
    task = update_task(get_store(), g.user_id, task_id, request.get_json(silent=True))
    return jsonify(task.to_dict()), 200


@api_bp.route("/tasks/<int:task_id>", methods=["DELETE"])
@require_auth
def delete_one_task(task_id: int) -> tuple[Response, int]:
    delete_task(get_store(), g.user_id, task_id)
    return jsonify({"message": "Task removed"}), 200


@api_bp.route("/tasks/<int:task_id>/toggle", methods=["PATCH"])
@require_auth
def toggle_task_status(task_id: int) -> tuple[Response, int]:
    task = toggle_task(get_store(), g.user_id, task_id)
    return jsonify(task.to_dict()), 200
