"""Login session management backed by Redis.

A login issues an opaque random token. The token is the Redis key suffix and
the value is a small JSON document naming the user, so every request can be
validated server-side and a logout or role change takes effect immediately.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bastadental.services.cache import cache_delete, cache_get, cache_set

LOGGER = logging.getLogger(__name__)
SESSION_PREFIX = "bastadental:auth:"
TOKEN_BYTES = 32


def _session_key(token: str) -> str:
    return f"{SESSION_PREFIX}{token}"


def create_session(user_id: int, role: str, ttl_seconds: int) -> str:
    """Persist a new login session and return its token."""

    token = secrets.token_urlsafe(TOKEN_BYTES)
    payload = {
        "user_id": user_id,
        "role": role,
        "issued_at": datetime.now(timezone.utc).isoformat(),
    }
    cache_set(_session_key(token), json.dumps(payload), ex=ttl_seconds)
    LOGGER.debug("Created session for user=%s role=%s", user_id, role)
    return token


def load_session(token: str) -> Optional[Dict[str, Any]]:
    """Return the session payload for a token, or None when unknown or expired."""

    if not token:
        return None

    raw_state = cache_get(_session_key(token))
    if raw_state is None:
        return None

    try:
        state: Dict[str, Any] = json.loads(raw_state)
    except json.JSONDecodeError:
        LOGGER.warning("Session payload invalid JSON; discarding")
        delete_session(token)
        return None

    if not isinstance(state.get("user_id"), int):
        delete_session(token)
        return None

    return state


def delete_session(token: str) -> None:
    """Remove a session from Redis."""

    cache_delete(_session_key(token))
