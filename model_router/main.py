"""FastAPI application entry point for Model Router service."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from model_router import __version__
from model_router.config import get_settings
from model_router.errors import ModelRoutingError
from model_router.routers import chat_router, health_router, models_router
from model_router.services.resolver import close_resolver, get_resolver

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    logger.info("Starting Model Router service...")

    # Provider credentials are read from os.environ, so .env must land there
    load_dotenv()

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Log level: {settings.log_level}")

    resolver = get_resolver()
    enabled = resolver.list_enabled_definitions()
    logger.info(
        f"Model registry loaded: {len(enabled)}/{len(resolver.registry)} models enabled, "
        f"providers: {resolver.gate.provider_status()}"
    )
    if not enabled:
        logger.warning("No provider credentials configured; every chat request will fail")

    logger.info("Model Router service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Model Router service...")
    await close_resolver()
    logger.info("Model Router service shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Model Router",
    description=(
        "Resolves model identifiers to Cerebras or AI Gateway clients, checks provider "
        "credentials, and proxies chat completions with streaming support."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
    openapi_url="/api/v1/openapi.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ModelRoutingError)
async def routing_error_handler(request: Request, exc: ModelRoutingError) -> JSONResponse:
    """Report resolution failures with a message operators can act on."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error_code, "detail": exc.message},
    )


# Include routers with /api/v1 prefix
app.include_router(health_router, prefix="/api/v1")
app.include_router(models_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "model-router",
        "version": __version__,
        "docs": "/api/v1/docs",
    }


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "model_router.main:app",
        host="0.0.0.0",
        port=settings.service_port,
        reload=True,
    )
