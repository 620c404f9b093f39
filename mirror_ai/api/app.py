"""FastAPI application for the MirrorAI verification service."""

import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.dependencies import get_service_container
from .endpoints import health, verify

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application.

    Providers are created lazily by the service container on the first
    verification; shutdown releases whatever was created.
    """
    logger.info("🚀 MirrorAI service starting")

    yield  # Application runs here

    await get_service_container().shutdown()


# Create FastAPI application
app = FastAPI(
    title="MirrorAI API",
    description="Claim extraction, DKG evidence retrieval and truth scoring",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(verify.router)
