"""WSGI entry point for the Taskflow API."""

import atexit
import os

from taskflow_app import create_app
from taskflow_app.store import close_store

app = create_app(os.getenv("FLASK_ENV", "production"))
atexit.register(close_store, app)


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=app.config["PORT"])
