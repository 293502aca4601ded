"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from .middleware import register_error_handlers
from .routes import search
from ..services.config import get_config
from ..services.database import DatabaseService
from ..services.seed import init_and_seed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    config = get_config()
    logger.info("Running startup: initializing database...")
    init_and_seed(DatabaseService(config.database_path), seed=config.seed_demo_data)
    logger.info("Startup complete: database ready")
    yield


app = FastAPI(
    title="Chat Search API",
    description="Membership-scoped message search with cursor pagination",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(search.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


__all__ = ["app"]
