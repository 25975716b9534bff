"""
OKR Tracker API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from okr_server.api.v1 import router as api_v1_router
from okr_server.api.v1.auth import router as auth_router
from okr_server.core.config import get_settings
from okr_server.core.database import engine, get_session, init_db
from okr_server.core.errors import StoreFailure, register_exception_handlers
from okr_server.core.logging_config import configure_logging
from okr_server.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

settings = get_settings()
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="OKR Tracker",
        description="Objectives and key results for organizations, departments and teams.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (last added runs outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    register_exception_handlers(app)

    # Auth routes (not org-scoped)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(session: AsyncSession = Depends(get_session)):
        """Readiness check: the store must answer a trivial query."""
        try:
            await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log.error("ready.store_unavailable", error=str(exc))
            raise StoreFailure("Store unavailable") from exc
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("server.starting", host=settings.host, port=settings.port)
        if settings.create_tables_on_startup:
            await init_db()
            log.info("db.tables_created")

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("server.shutting_down")
        await engine.dispose()

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "okr_server.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
