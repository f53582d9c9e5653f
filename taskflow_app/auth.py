"""
Bearer-token issuance and verification.

Tokens are HS256-signed JWTs carrying the owner's ``user_id`` plus the
standard ``iat``/``exp`` claims.  ``require_auth`` protects endpoints: it
resolves the ``Authorization: Bearer <token>`` header to a ``User`` and
stores the identity on ``flask.g`` for the rest of the request.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any

import jwt
from flask import current_app, g, request

from . import db
from .errors import Unauthenticated
from .models import User

ALGORITHM = "HS256"
REQUIRED_TOKEN_CLAIMS = ["user_id", "iat", "exp"]


def create_token(user_id: int, secret: str, expiry_hours: int) -> str:
    """
    Create an HS256-signed JWT for the given user.

    Args:
        user_id: Primary key of the authenticated user.  Must be positive.
        secret: Shared signing secret (``JWT_SECRET_KEY``).
        expiry_hours: Number of hours from now until the token expires.

    Returns:
        A compact JWS string suitable for an ``Authorization`` header.

    Raises:
        ValueError: If *user_id* is not a positive integer.
    """
    if int(user_id) <= 0:
        raise ValueError("user_id must be a positive integer")

    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "user_id": int(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=int(expiry_hours))).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT, returning the payload on success.

    Checks the signature, the algorithm (HS256 only), expiry with the
    configured clock-skew leeway, the presence of every required claim and
    that ``user_id`` is a positive integer.

    Returns:
        The decoded payload, or ``None`` if verification fails for any reason.
    """
    try:
        decoded = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=int(current_app.config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
        )
    except jwt.InvalidTokenError:
        return None

    user_id = decoded.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
        return None
    return decoded


def _extract_bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def authenticate_request() -> User:
    """
    Resolve the current request's bearer token to a ``User``.

    Raises:
        Unauthenticated: If the header is missing or malformed, the token
            fails verification, or the user no longer exists.
    """
    token = _extract_bearer_token()
    if token is None:
        raise Unauthenticated("Not authorized, no token")

    payload = verify_token(token, current_app.config["JWT_SECRET_KEY"])
    if payload is None:
        raise Unauthenticated("Not authorized, token failed")

    user = db.session.get(User, payload["user_id"])
    if user is None:
        raise Unauthenticated("Not authorized, user not found")
    return user


def require_auth(view_func: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator that enforces bearer-token authentication on an endpoint.

    On success ``g.user_id`` and ``g.current_user`` are populated before the
    wrapped view runs; on failure ``Unauthenticated`` propagates to the
    application's error handler and the view is never invoked.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        user = authenticate_request()
        g.current_user = user
        g.user_id = user.id
        return view_func(*args, **kwargs)

    return wrapper
