"""Main FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, session
from .core import UpscaleOrchestrator
from .providers import GeminiImageClient
from .utils.config import load_config
from .utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown.

    Builds the Gemini client and the session orchestrator on startup,
    closes the client on shutdown.
    """
    logger.info("Application starting up...")

    try:
        config = load_config()

        gemini = GeminiImageClient(
            api_key=config.api_key,
            model=config.image_model,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )
        await gemini.initialize()

        if not config.has_credential:
            logger.warning("API_KEY is not set; upscale requests will fail until it is configured")

        app.state.config = config
        app.state.gemini = gemini
        app.state.orchestrator = UpscaleOrchestrator(
            client=gemini,
            api_key=config.api_key,
        )

        logger.info("Application startup complete")

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("Application shutting down...")
    await gemini.close()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="OBATECH AI Upscaler",
    description="Upscale images to 2K or 4K with Gemini image generation",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(session.router, prefix="/session", tags=["session"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "obatech-upscaler",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "obatech_upscaler.main:app",
        host="0.0.0.0",
        port=port,
        log_level="info",
    )
