"""
FastAPI application for monday.com webhooks.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from monday_sync.config import settings
from monday_sync.core.logging import configure_logging, get_logger
from monday_sync.routers.forward import router as forward_router
from monday_sync.routers.oauth import router as oauth_router
from monday_sync.routers.webhook import router as webhook_router
from monday_sync.scheduler import start_scheduler, stop_scheduler

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)
    log.info("application_starting")

    settings.download_dir.mkdir(parents=True, exist_ok=True)

    if settings.scheduler_enabled:
        start_scheduler()
    else:
        log.info("scheduler_disabled", reason="run the email archive manually")

    yield

    if settings.scheduler_enabled:
        stop_scheduler()
    log.info("application_stopped")


app = FastAPI(
    title="monday.com sync",
    description="Webhook receiver and CRM sync jobs for monday.com boards",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(webhook_router)
app.include_router(forward_router)
app.include_router(oauth_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# Run with: uvicorn monday_sync.main:app --host 0.0.0.0 --port 3000
