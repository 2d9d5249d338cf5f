"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repcounter.config import get_settings
from repcounter.api import api_router

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name}")
    yield
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="""
    Exercise Rep Counter API

    Real-time repetition counting and form feedback from pose landmarks.
    The pose estimator runs on the client; this service receives one frame
    of named 2D landmarks at a time.

    ## Key Features

    - **Rep Counting**: One count per complete start -> peak -> start cycle, with cooldown
    - **Form Feedback**: Informational hints and severe violations that void a rep
    - **Vital-Sign Pause**: Tracking pauses while heart rate, SpO2 or breathing rate are out of range
    """,
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware, only for configured browser origins
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "health": "/health"
    }
