"""FastAPI application for nano-snapshot."""

import dataclasses
import logging
import os
import sys
from contextlib import asynccontextmanager

import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nano_snapshot._cluster import ClusterClientFactory
from nano_snapshot.config import ClusterConfig, validate_config
from .config import settings
from .routers import backup, health, jobs, restore

# Configure nano-snapshot logger with app-managed pattern
# This ensures INFO logs are visible regardless of uvicorn's logging config
snapshot_logger = logging.getLogger("nano-snapshot")
snapshot_logger.setLevel(logging.INFO)

# App-managed pattern: attach our own handler and don't propagate
snapshot_logger.propagate = False

# Clear any existing handlers to avoid duplicates
snapshot_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
snapshot_logger.addHandler(console_handler)

# Optional: Allow disabling app-managed logging via env var for production
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    snapshot_logger.handlers.clear()
    snapshot_logger.propagate = True  # Fall back to server-managed pattern

logger = logging.getLogger(__name__)


def build_cluster_config() -> ClusterConfig:
    """Cluster config from SOLR_* environment, with API settings applied on top."""
    config = ClusterConfig.from_env()

    overrides = {}
    if settings.cluster_backend:
        overrides["backend"] = settings.cluster_backend
    if settings.backup_location:
        overrides["backup_location"] = settings.backup_location

    return dataclasses.replace(config, **overrides) if overrides else config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage cluster client and Redis lifecycle."""
    config = build_cluster_config()
    logger.info(f"Initializing {config.backend} cluster client for {config.base_url}")
    for warning in validate_config(config):
        logger.warning(warning)

    app.state.cluster_client = ClusterClientFactory.create(config)

    # Initialize Redis client for job tracking if Redis URL is configured
    if settings.redis_url:
        try:
            app.state.redis_client = redis.from_url(
                settings.redis_url,
                password=settings.redis_password,
                encoding="utf-8",
                decode_responses=True
            )
            await app.state.redis_client.ping()
            logger.info("Redis client initialized for job tracking")
        except RedisError as e:
            logger.warning(f"Failed to initialize Redis client: {e}")
            app.state.redis_client = None
    else:
        app.state.redis_client = None
        logger.info("Redis not configured - job tracking disabled")

    yield

    # Cleanup
    logger.info("Shutting down cluster client...")
    await app.state.cluster_client.close()
    if app.state.redis_client:
        await app.state.redis_client.aclose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(jobs.router, prefix=settings.api_prefix)
    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(restore.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()
