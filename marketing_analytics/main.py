"""
FastAPI application entry point for the Marketing Analytics API.

Configures logging, the asyncpg pool lifecycle, CORS and the API routers.
The marketing overview is served read-only from the analytics views; when no
database is configured the app still starts and serves empty reports.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import asyncpg
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketing_analytics import __version__
from marketing_analytics.api import api_router
from marketing_analytics.core.config import get_settings
from marketing_analytics.core.database import close_db, init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for startup and shutdown.

    On startup:
        - Initialize the database connection pool when DATABASE_URL is set

    On shutdown:
        - Close the database connection pool
    """
    logger.info("Marketing Analytics API starting")
    if get_settings().database_configured:
        try:
            await init_db()
            logger.info("Database connection pool initialized")
        except (asyncpg.PostgresError, OSError) as e:
            # Reads retry pool creation lazily through get_db_pool()
            logger.error(f"Failed to initialize database: {e}")
    else:
        logger.warning("DATABASE_URL not configured, serving empty reports")

    yield

    logger.info("Marketing Analytics API shutting down")
    await close_db()
    logger.info("Database connection pool closed")


# Create FastAPI application
app = FastAPI(
    title="Marketing Analytics API",
    version=__version__,
    description=(
        "Read-only marketing overview: KPIs, period comparisons, page, source "
        "and SEO listings, daily timeseries and anomaly flags."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(api_router)  # marketing router has its own /activity-spine/marketing prefix


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Marketing Analytics API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "marketing_analytics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
