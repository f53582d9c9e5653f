"""
Taskflow Flask Application Factory.

Provides the ``create_app`` factory function that assembles the personal
task-management API.  The factory pattern allows multiple application
instances with different configurations (development, testing, production)
to coexist in the same process, which the test-suite relies on.

The application registers two blueprints:
  * **auth_bp** -- account endpoints mounted at ``/api/auth``.
  * **api_bp** -- health check and task endpoints mounted at ``/api``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from flask import Flask
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

from config import DEV_JWT_SECRET_KEY, get_config

db = SQLAlchemy()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _ensure_sqlite_db_parent_exists(database_uri: str) -> None:
    """Create parent directories for file-based SQLite URIs when missing."""
    sqlite_prefix = "sqlite:///"
    if not database_uri.startswith(sqlite_prefix):
        return

    sqlite_path = database_uri[len(sqlite_prefix) :].split("?", 1)[0]
    if sqlite_path == ":memory:":
        return

    Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Taskflow application.

    Loads the configuration object, initialises extensions (SQLAlchemy,
    CORS), registers blueprints and error handlers, and connects the task
    store, which creates any missing tables.

    Args:
        config_name: Optional configuration environment name
            (``"development"``, ``"testing"``, ``"production"``).  When *None*,
            the value is read from the ``FLASK_ENV`` environment variable,
            defaulting to ``"development"``.

    Returns:
        A fully configured Flask application instance ready to serve requests.

    Raises:
        RuntimeError: If the production configuration still carries the
            development token-signing secret.
    """
    app = Flask(__name__, instance_relative_config=True)
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    if not app.config["DEBUG"] and not app.config["TESTING"]:
        if app.config["JWT_SECRET_KEY"] == DEV_JWT_SECRET_KEY:
            raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    logger.info("Creating Taskflow app with config: %s", config_class.__name__)

    os.makedirs(app.instance_path, exist_ok=True)
    _ensure_sqlite_db_parent_exists(app.config.get("SQLALCHEMY_DATABASE_URI", ""))

    db.init_app(app)
    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
    )

    from .errors import register_error_handlers
    from .routes.api import api_bp
    from .routes.auth import auth_bp
    from .store import TaskStore

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(api_bp, url_prefix="/api")
    register_error_handlers(app)

    store = TaskStore(db)
    app.extensions["task_store"] = store
    with app.app_context():
        store.connect()

    return app
