"""Request dependencies: database session, current user and role checks."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from bastadental.errors import AuthenticationFailed, PermissionDenied
from bastadental.models import User
from bastadental.models.user import ROLE_ADMIN
from bastadental.services import session as login_sessions
from bastadental.services.db import get_db

LOGGER = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str] = Header(default=None)) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationFailed("Authentication required")
    return token.strip()


def get_current_user(
    token: str = Depends(bearer_token),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a live user row."""

    state = login_sessions.load_session(token)
    if state is None:
        raise AuthenticationFailed("Session expired or invalid, please log in again")

    user = db.get(User, state["user_id"])
    if user is None:
        login_sessions.delete_session(token)
        raise AuthenticationFailed("Session expired or invalid, please log in again")
    return user


def require_roles(*roles: str) -> Callable[..., User]:
    """Dependency factory that admits only users holding one of ``roles``."""

    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            LOGGER.info("Denied user_id=%s role=%s (needs %s)", user.id, user.role, roles)
            raise PermissionDenied("You do not have permission to perform this action")
        return user

    return checker


def ensure_self_or_admin(actor: User, user_id: int) -> None:
    if actor.role != ROLE_ADMIN and actor.id != user_id:
        raise PermissionDenied("You can only access your own account")
