"""Caller identification for API routes.

# ─── HOW AUTH TOKENS WORK ────────────────────────────────────────────
#
# Bearer tokens are HMAC-SHA256 signed and stateless (no session DB).
#
# Token format:  {user_id}:{issued_at}:{hmac_hex_digest}
#   - user_id:   the caller's stable identifier
#   - issued_at: UTC epoch seconds when the token was created
#   - hmac:      HMAC-SHA256(secret, "{user_id}:{issued_at}")
#
# Validation checks:
#   1. Token splits into three parts and issued_at is an integer
#   2. Token is not older than the TTL
#   3. HMAC signature matches (constant-time comparison)
#
# Without AUTH_SECRET (development) the X-User-Id header is trusted.
# ─────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Annotated

import structlog
from fastapi import Depends, Request

from mindmarks.config.settings import Settings
from mindmarks.utils.errors import AuthenticationError


def _sign(secret: str, payload: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def create_access_token(user_id: str, secret: str, issued_at: int | None = None) -> str:
    """Create a signed bearer token for *user_id*."""
    timestamp = str(int(time.time()) if issued_at is None else issued_at)
    payload = f"{user_id}:{timestamp}"
    return f"{payload}:{_sign(secret, payload)}"


def verify_access_token(
    token: str,
    secret: str,
    ttl_hours: int = 168,
    now: float | None = None,
) -> str | None:
    """Return the user id carried by *token*, or ``None`` if it is invalid or expired."""
    if not token or token.count(":") < 2:
        return None

    user_id, timestamp_str, provided_hmac = token.rsplit(":", 2)
    if not user_id:
        return None
    try:
        issued_at = int(timestamp_str)
    except ValueError:
        return None

    current = time.time() if now is None else now
    if current - issued_at > ttl_hours * 3600:
        return None

    expected_hmac = _sign(secret, f"{user_id}:{timestamp_str}")
    if not hmac.compare_digest(provided_hmac, expected_hmac):
        return None
    return user_id


async def get_current_user_id(request: Request) -> str:
    """Resolve the caller's user id or raise :class:`AuthenticationError`.

    The resolved id is bound into the structlog context so every event
    logged while serving the request carries it.
    """
    user_id = _resolve_user_id(request)
    structlog.contextvars.bind_contextvars(user_id=user_id)
    return user_id


def _resolve_user_id(request: Request) -> str:
    settings: Settings = request.app.state.settings

    if settings.auth_secret:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationError("Unauthorized")
        user_id = verify_access_token(
            token.strip(), settings.auth_secret, ttl_hours=settings.auth_token_ttl_hours
        )
        if user_id is None:
            raise AuthenticationError("Unauthorized")
        return user_id

    user_id = request.headers.get("X-User-Id", "").strip()
    if not user_id:
        raise AuthenticationError("Unauthorized")
    return user_id


CurrentUserDep = Annotated[str, Depends(get_current_user_id)]
