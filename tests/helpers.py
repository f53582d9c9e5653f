"""Test helper functions shared across the test suites."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

TEST_JWT_SECRET_KEY = "test-jwt-secret-key-for-local-tests-123456"


def create_test_token(
    user_id: int,
    secret: str = TEST_JWT_SECRET_KEY,
    expired: bool = False,
    algorithm: str = "HS256",
) -> str:
    """Create a signed test token with the required claims."""
    now = datetime.now(timezone.utc)
    expiry_time = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload: dict[str, Any] = {
        "user_id": int(user_id),
        "iat": int(now.timestamp()),
        "exp": int(expiry_time.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def auth_headers(token: str) -> dict[str, str]:
    """Build common JSON API headers with bearer token auth."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
