"""
EvenTaro API - Main Application Entry Point

Event reservation platform:
- Administrators publish events with a finite capacity
- Users reserve a place; administrators confirm, refuse or cancel
- Confirmed users can cancel up to 48h ahead and download a PDF ticket
- Structured logging with request correlation, Prometheus metrics
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession

from eventaro.core.config import get_settings
from eventaro.core.logging import setup_logging, get_logger
from eventaro.core.metrics import metrics_endpoint
from eventaro.api.router import api_router
from eventaro.api.errors import register_exception_handlers
from eventaro.api.middleware import RequestLoggingMiddleware
from eventaro.db.session import engine, get_db, check_db_connected

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    yield

    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event reservation API with capacity-checked bookings and PDF tickets",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)

app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db, scope="function")):
    """Health check endpoint for Docker and load balancers."""
    database = "connected" if await check_db_connected(db) else "disconnected"
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": database,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "eventaro.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
