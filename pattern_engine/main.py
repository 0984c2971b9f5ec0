"""FastAPI application entry point with structured logging and health checks."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pattern_engine.api import analysis, patterns
from pattern_engine.database import init_db
from pattern_engine.health import VERSION
from pattern_engine.health import router as health_router
from pattern_engine.logging_config import get_logger, setup_logging

setup_logging(
    json_logs=os.getenv("JSON_LOGS", "false").lower() == "true",
    log_level=os.getenv("LOG_LEVEL", "INFO"),
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the FastAPI application."""
    logger.info("application_startup", version=VERSION)
    init_db()
    logger.info("database_initialized")
    yield
    logger.info("application_shutdown")


app = FastAPI(
    title="Paradocs Patterns",
    description=(
        "Detects geographic clusters, temporal spikes and seasonal cycles "
        "in paranormal sighting reports and tracks them as patterns over time."
    ),
    version=VERSION,
    lifespan=lifespan,
)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# Health checks (no versioning)
app.include_router(health_router, tags=["health"])

API_V1_PREFIX = "/api/v1"

app.include_router(patterns.router, prefix=f"{API_V1_PREFIX}/patterns", tags=["patterns"])
app.include_router(analysis.router, prefix=f"{API_V1_PREFIX}/analysis", tags=["analysis"])


@app.get("/")
def root():
    """Root endpoint - API information and available endpoints."""
    return {
        "service": "Paradocs Patterns API",
        "version": VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "api_version": "v1",
        "endpoints": {
            "patterns": f"{API_V1_PREFIX}/patterns/",
            "trending": f"{API_V1_PREFIX}/patterns/trending",
            "nearby": f"{API_V1_PREFIX}/patterns/nearby",
            "analysis_runs": f"{API_V1_PREFIX}/analysis/runs",
        },
    }
