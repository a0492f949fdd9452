"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session, sessionmaker

from bastadental.errors import ClinicError
from bastadental.routers import get_api_router
from bastadental.services.db import build_engine, build_session_factory, init_db
from bastadental.services.users import UserService
from bastadental.utils.config import Settings, get_settings

LOGGER = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "is invalid")
    return f"{field}: {detail}" if field else detail


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ClinicError)
    async def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": _validation_message(exc)},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Server error"},
        )


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker[Session]] = None,
) -> FastAPI:
    """Build the application.

    Without a ``session_factory`` one is built from ``settings.database_url``.
    Either way the schema is created and the admin account seeded on startup.
    """

    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    if session_factory is None:
        engine = build_engine(settings.database_url, echo=settings.database_echo)
        session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(session_factory.kw["bind"])
        with session_factory() as session:
            UserService(session, settings).seed_admin()
        LOGGER.info("%s %s started", settings.app_name, settings.app_version)
        yield

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.session_factory = session_factory
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)
    app.include_router(get_api_router(), prefix="/api")

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Return service health status."""

        return {"status": "ok"}

    @app.get("/version")
    def version() -> dict[str, str]:
        """Return application version metadata."""

        return {"version": settings.app_version}

    if settings.frontend_dir:
        frontend = Path(settings.frontend_dir)
        if frontend.is_dir():
            app.mount("/", StaticFiles(directory=frontend, html=True), name="frontend")
        else:
            LOGGER.warning("Frontend directory %s not found; not serving it", frontend)

    return app


app = create_app()
