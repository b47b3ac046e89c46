"""Vendor Hub API — FastAPI application factory."""


import logging
import sys

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.config import settings
from vendor_hub.core.exceptions import register_exception_handlers
from vendor_hub.db.base import get_db
from vendor_hub.schemas.common import HealthResponse

# Organization-scoped routes (/org/{organization_id}/api/vendors/*)
from vendor_hub.routers.org_vendors import router as org_vendors_router

# v1 catalog administration routers
from vendor_hub.routers.v1.retail_verticals import router as retail_verticals_v1_router
from vendor_hub.routers.v1.vendor_types import router as vendor_types_v1_router


def _configure_logging() -> None:
    """Set up pipe-delimited logging for the application."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- Organization-scoped vendor routes ---
    app.include_router(org_vendors_router)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(vendor_types_v1_router, prefix="/api/v1")
    app.include_router(retail_verticals_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health(session: AsyncSession = Depends(get_db)):
        database = "ok"
        try:
            await session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logging.getLogger(__name__).exception("Health check could not reach the database")
            database = "unavailable"
        return HealthResponse(app=settings.app_name, env=settings.app_env, database=database)

    return app


app = create_app()
