"""
HR Desk API

Leave management (balances, applications, approvals, calendar) and payslip
management (salary structures, generation, status).

Request path through the middleware: CORS -> CorrelationId -> Logging -> RateLimiting
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

import hrdesk.models  # noqa: F401  registers every model on Base.metadata
from hrdesk.core.config import settings
from hrdesk.core.handlers import register_exception_handlers
from hrdesk.core.limiter import limiter
from hrdesk.core.logging import setup_logging
from hrdesk.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from hrdesk.database import SessionLocal, init_db
from hrdesk.routers.api_router import api_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
    try:
        init_db()
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    logger.info("Database schema ready")

    yield

    logger.info(f"{settings.app_name} shutting down")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Leave requests, leave balances, the team leave calendar and payslips",
        lifespan=lifespan,
    )

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(application)

    # Starlette runs the last added middleware first
    application.add_middleware(SlowAPIMiddleware)
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.request_id_header, "X-Process-Time"],
    )

    application.include_router(api_router, prefix=settings.api_prefix)
    return application


app = create_app()


@app.get("/", tags=["Health"])
def root():
    return {
        "message": f"{settings.app_name} API",
        "version": settings.version,
        "api": settings.api_prefix,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Liveness check: the process is up, the database is not consulted."""
    return {
        "status": "up",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
    }


@app.get("/readiness", tags=["Health"])
def readiness_check():
    """Readiness check: the database answers SELECT 1."""
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Database unavailable")
    return {
        "status": "ready",
        "components": {"database": "connected"},
    }
