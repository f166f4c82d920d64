"""FastAPI application factory.

Learn: App factory pattern. create_app() returns a configured FastAPI
instance. Settings and the Database handle are passed in (or built from
the environment) and stored on app.state; nothing reaches for a global
connection. Lifespan manages startup/shutdown of the database.

Run with: uvicorn --factory docman.main:create_app
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from docman import __version__
from docman.api import api_router
from docman.config import Settings
from docman.config import settings as default_settings
from docman.db.engine import Database
from docman.errors import DocmanError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.db
    logger.info(
        "docman.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    if settings.create_tables:
        await database.create_all()
        logger.info("docman.schema_ready")

    yield

    logger.info("docman.shutdown")
    await database.dispose()


# ─── Error rendering ────────────────────────────────────


async def _domain_error(request: Request, exc: DocmanError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        loc = ".".join(str(part) for part in errors[0].get("loc", ()))
        detail = f"Invalid request: {loc} {errors[0].get('msg', '')}".strip()
    return JSONResponse(status_code=400, content={"error": detail})


async def _store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("docman.store_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings

    app = FastAPI(
        title="Docman",
        description="Document management backend: accounts, roles, documents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = database or Database.from_settings(settings)

    app.add_exception_handler(DocmanError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_error)
    app.add_exception_handler(SQLAlchemyError, _store_error)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from docman.middleware.request_id import RequestIdMiddleware
    from docman.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app
