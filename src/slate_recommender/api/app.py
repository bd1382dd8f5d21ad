"""
FastAPI application for the slate recommender service.

The lifespan handler builds the data store, loads the weight table and
constructs the pipeline once; routes reach them through ``app.state``.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
import structlog

from ..version import API_VERSION
from ..config import settings
from ..logging_config import setup_logging
from ..pipeline import SlatePipeline
from ..scoring.weights import load_weights
from ..store.database import SlateStore
from .routes import health, recommend, version
from .middleware import (
    setup_logging_middleware,
    setup_error_handling_middleware,
)

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    store = SlateStore.from_settings(settings)
    if settings.database_create_tables:
        store.create_all_tables()

    weights = load_weights(settings.weights_file)
    app.state.store = store
    app.state.weights = weights
    app.state.pipeline = SlatePipeline.from_settings(store, weights, settings)

    logger.info(
        "Starting Slate Recommender API",
        version=API_VERSION,
        log_level=settings.log_level,
        weights_version=weights.weights.version,
        weights_degraded=weights.degraded,
    )
    yield
    logger.info("Shutting down Slate Recommender API")
    store.dispose()


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Slate Recommender",
        description="Explainable, diversity-constrained recommendation slates over saved items",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Custom middleware (order matters)
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/v1", tags=["Version"])
    app.include_router(recommend.router, prefix="/v1", tags=["Recommend"])

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "slate_recommender.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
