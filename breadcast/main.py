"""
Breadcast FastAPI application.

Main application entry point with route registration, CORS, error handling
and background jobs.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, PlainTextResponse
from contextlib import asynccontextmanager
import logging

from breadcast.config import settings, RenderMode
from breadcast.api.routes import frames
from breadcast.clients.pinata_client import PinataClient
from breadcast.engine.asset_cache import AssetTTLCache, PinOnceAssetCache
from breadcast.errors import BreadcastError
from breadcast.jobs.cache_maintenance import flush_pin_map, start_scheduler, stop_scheduler
from breadcast.services.factory import create_frame_service
from breadcast.services.render_service import SvgFrameRenderer

# Configure logging with configurable level
_log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
logging.basicConfig(
    level=_log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Builds the object store client, renderer, caches and frame service once
    and shares them with every request through app.state.
    """
    # Startup
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version} "
        f"({settings.render_mode.value} mode)"
    )

    object_store = PinataClient()
    renderer = SvgFrameRenderer()
    pin_cache = None
    ttl_cache = None
    scheduler = None

    if settings.render_mode == RenderMode.LIVE_PINNED:
        pin_cache = PinOnceAssetCache.load(settings.pin_map_file)
        logger.info(f"Loaded {pin_cache.size} pinned assets from {settings.pin_map_file}")
        scheduler = start_scheduler(pin_cache=pin_cache, pin_map_path=settings.pin_map_file)
    elif settings.render_mode == RenderMode.LIVE_CACHE:
        ttl_cache = AssetTTLCache(settings.rerender_ttl_seconds)
        scheduler = start_scheduler(ttl_cache=ttl_cache)

    app.state.object_store = object_store
    app.state.frame_service = create_frame_service(
        settings, object_store, renderer, pin_cache=pin_cache, ttl_cache=ttl_cache
    )

    yield

    # Shutdown
    logger.info("Shutting down application...")
    stop_scheduler(scheduler)
    if pin_cache is not None:
        flush_pin_map(pin_cache, settings.pin_map_file)
    await object_store.aclose()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Interactive recipe card frames backed by IPFS",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BreadcastError)
async def breadcast_error_handler(request: Request, exc: BreadcastError):
    """
    Turn application errors into frame-friendly responses.

    Not-found recipes get a plain-text 404. Other failures get a button-less
    error frame so clients still have something to display.
    """
    if exc.status_code == 404:
        return PlainTextResponse("Recipe not found", status_code=404)

    logger.error(f"Frame request failed: {exc.to_response().model_dump()}")
    service = getattr(request.app.state, "frame_service", None)
    if service is not None:
        try:
            error_html = await service.render_error_frame()
            return HTMLResponse(content=error_html, status_code=exc.status_code)
        except BreadcastError as render_exc:
            logger.error(f"Could not render error frame: {render_exc.message}")
    return PlainTextResponse("Unable to display recipe", status_code=exc.status_code)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "mode": settings.render_mode.value,
    }


# Registered last: the frame route captures every single-segment path
app.include_router(frames.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "breadcast.main:app",
        host="0.0.0.0",
        port=3000,
        reload=settings.debug,
    )
