"""
Main entrypoint for the Startech Management API.

This module assembles the FastAPI application, sets up logging, opens
the database and includes the API router.  The ``create_app`` function
builds and configures the app, which is then instantiated at module
import time as ``app``, so it can be served directly::

    uvicorn startech_api.app.main:app --reload

Every error leaves the API in the same envelope as successful
responses: ``{"success": false, "error": "..."}``.
"""

import logging
import sqlite3
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as api_router
from .core.config import Settings, settings as default_settings
from .core.db import Database, resolve_project_path
from .core.logging_config import setup_activity_log, setup_logging

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "error": "Të dhëna të pavlefshme",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(sqlite3.IntegrityError)
    async def integrity_error_handler(request: Request, exc: sqlite3.IntegrityError) -> JSONResponse:
        # Typically two writers picked the same generated identifier.
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"success": False, "error": "Regjistri ekziston tashmë", "message": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "Gabim i brendshëm i serverit",
                "message": str(exc),
            },
        )


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use; defaults to the module-level settings read
        from the environment.
    db : Optional[Database]
        Database handle; by default one is opened at
        ``settings.database_url``.  Migrations are applied before the
        app is returned.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the setup below
    # can log.
    setup_logging(settings.log_level, settings.log_file or None)
    activity_log_dir = resolve_project_path(settings.activity_log_dir) if settings.activity_log_dir else None
    setup_activity_log(activity_log_dir)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    db = db or Database(settings.database_url)
    db.init()
    app.state.db = db
    app.state.settings = settings
    app.state.activity_log_dir = activity_log_dir
    logger.info("Using database %s", db.path)

    _register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
