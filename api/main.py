"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, contacts
from api.dependencies import get_runner
from api.middleware import RequestContextMiddleware
from core.config import settings
from core.logging import setup_logging
from ingestion.scheduler import ContactRefreshScheduler
import logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Contact Feed API",
    description="Normalized contacts from the customer CSV feed, with caching and offline fallback",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = ContactRefreshScheduler(get_runner())


# Include routers
app.include_router(health.router)
app.include_router(contacts.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Contact Feed API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Source: {'bundled sample data' if settings.USE_LOCAL_CSV else settings.CSV_URL}")

    # Start Scheduler
    scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Contact Feed API")
    scheduler.stop()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Contact Feed API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "contacts": "/contacts",
            "refresh": "/contacts/refresh",
            "export": "/contacts/export",
            "cache": "/cache"
        }
    }
