"""
Account endpoints.

Endpoints:
    POST /api/auth/register  -- Create an account and receive a token.
    POST /api/auth/login     -- Exchange email/password for a token.
    GET  /api/auth/me        -- Profile of the authenticated user.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Response, current_app, g, jsonify, request
from sqlalchemy import select

from .. import db
from ..auth import create_token, require_auth
from ..errors import Conflict, Unauthenticated, ValidationError
from ..models import User

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

NAME_MAX_LENGTH = 80
EMAIL_MAX_LENGTH = 120


def _validate_required_fields(data: dict[str, Any], required_fields: list[str]) -> None:
    """
    Check that every field in *required_fields* is a non-blank string.

    Raises:
        ValidationError: Naming the first missing or blank field.
    """
    for field in required_fields:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"'{field}' is required")


def _issue_token(user: User) -> str:
    return create_token(
        user_id=user.id,
        secret=current_app.config["JWT_SECRET_KEY"],
        expiry_hours=current_app.config["JWT_EXPIRY_HOURS"],
    )


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new account.

    Returns:
        201 with ``user`` and ``token`` on success.
        400 if a field is missing, blank or too long.
        409 if the email is already registered.
    """
    data = request.get_json(silent=True) or {}
    _validate_required_fields(data, ["name", "email", "password"])

    name = data["name"].strip()
    email = data["email"].strip().lower()

    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"name must be {NAME_MAX_LENGTH} characters or less")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"email must be {EMAIL_MAX_LENGTH} characters or less")

    if db.session.scalar(select(User).where(User.email == email)):
        raise Conflict("User already exists")

    user = User(name=name, email=email)
    user.set_password(data["password"])
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user_id=%s", user.id)

    return jsonify({"user": user.to_dict(), "token": _issue_token(user)}), 201


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate with email and password.

    The same message is returned for an unknown email and a wrong password
    so the response does not reveal which accounts exist.
    """
    data = request.get_json(silent=True) or {}
    _validate_required_fields(data, ["email", "password"])

    email = data["email"].strip().lower()
    user = db.session.scalar(select(User).where(User.email == email))
    if not user or not user.check_password(data["password"]):
        raise Unauthenticated("Invalid email or password")

    return jsonify({"user": user.to_dict(), "token": _issue_token(user)}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me() -> tuple[Response, int]:
    return jsonify({"user": g.current_user.to_dict()}), 200
