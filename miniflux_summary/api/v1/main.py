"""
This is the main FastAPI application file that defines the API endpoints for the Miniflux summary relay.
Run it with: `uvicorn miniflux_summary.api.v1.main:app`
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, FastAPI, Request
from fastapi.responses import JSONResponse

from miniflux_summary.config import load_settings
from miniflux_summary.core.exceptions import AuthError, DecodeError
from miniflux_summary.core.signature import SIGNATURE_HEADER
from miniflux_summary.core.use_cases import EntryPipeline

from miniflux_summary.utils.logging_setup import get_logger
logger = get_logger(__name__, log_file="api_v1.log")

router = APIRouter()


# welcome endpoint
@router.get("/")
async def root():
    return {
        "message": "Welcome to the Miniflux summary relay",
        "endpoints": {
            "webhook": "/webhooks/miniflux",
            "health": "/health"
        }
    }


# Health check endpoint
@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "miniflux-summary-relay"}


# This is the webhook endpoint Miniflux calls when new entries arrive.
@router.post("/webhooks/miniflux")
async def handle_miniflux_webhook(request: Request, background_tasks: BackgroundTasks):
    """
    Endpoint for Miniflux to POST webhook events.
    The signature is checked against the raw body before anything is decoded.
    By default the response waits for every entry; with WEBHOOK_BACKGROUND the work goes to BackgroundTasks
    and Miniflux gets a 200 right away.
    """
    pipeline: EntryPipeline = request.app.state.pipeline
    body = await request.body()

    try:
        event = pipeline.accept(body, request.headers.get(SIGNATURE_HEADER))
    except AuthError:
        return JSONResponse(status_code=401, content={"detail": "Invalid signature"})
    except DecodeError:
        return JSONResponse(status_code=400, content={"detail": "Malformed webhook body"})

    if not event.is_new_entries:
        return {"status": "ignored", "event_type": event.event_type}

    if pipeline.settings.webhook_background:
        logger.info("📬 Offloading entries to background task...")
        background_tasks.add_task(pipeline.process_event, event)
        return {"status": "received", "entries": len(event.entries)}

    report = await pipeline.process_event(event)
    return {"status": "processed", **report.counts()}


def create_app(pipeline: Optional[EntryPipeline] = None) -> FastAPI:
    """
    Build the application. Without an explicit pipeline, settings are loaded from the environment at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "pipeline", None) is None
        if owned:
            app.state.pipeline = EntryPipeline.from_settings(load_settings())
            logger.info("🚀 Pipeline configured from environment")
        yield
        if owned:
            app.state.pipeline.close()
            app.state.pipeline = None

    app = FastAPI(title="Miniflux Summary Relay", version="1.0.0", lifespan=lifespan)
    app.state.pipeline = pipeline
    app.include_router(router)
    return app


app = create_app()
