"""Database engine and per-request session management."""

import logging
from typing import Any, Dict, Iterator

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bastadental.models import Base

LOGGER = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""

    kwargs: Dict[str, Any] = {"future": True, "echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return the session factory stored on ``app.state``."""

    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def init_db(engine: Engine) -> None:
    """Create any missing tables."""

    LOGGER.info("Ensuring database schema on %s", engine.url.render_as_string())
    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    """Yield a session bound to the application's session factory.

    Services commit their own writes; anything left uncommitted when the
    request fails is rolled back here.
    """

    session: Session = request.app.state.session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
