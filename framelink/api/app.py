"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error handlers and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from framelink.api.contact import router as contact_router
from framelink.api.dependencies import get_file_repository
from framelink.api.errors import register_exception_handlers
from framelink.api.upload import router as upload_router
from framelink.storage.database import close_mongo_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Creates the MongoDB indexes on startup and closes the client on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting FrameLink Support API...")
    try:
        await run_in_threadpool(get_file_repository().ensure_indexes)
    except PyMongoError as e:
        logger.warning(f"Could not create MongoDB indexes: {e}")
    yield
    # Shutdown
    logger.info("Shutting down FrameLink Support API...")
    close_mongo_client()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="FrameLink Support API",
        description=(
            "Support contact Q&A and document uploads. Questions are answered by an "
            "OpenAI assistant that searches the uploaded documents, with streamed "
            "answers over server-sent events and a canned fallback when the "
            "assistant is unavailable."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(contact_router)
    application.include_router(upload_router)
    register_exception_handlers(application)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "framelink-support"}

    return application


app = create_app()
