"""
Knowledge Server Application Entry Point

Builds the FastAPI app that serves the knowledge index over HTTP. The index
is loaded once during startup; later reloads go through POST
/knowledge/refresh.
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from .config import settings
from .core.errors import (
    DocumentNotFoundError,
    KnowledgeLoadError,
    document_not_found_handler,
    knowledge_load_error_handler,
    unhandled_exception_handler,
)
from .api import (
    health_routes,
    knowledge_routes,
)
from .api.dependencies import get_knowledge_index


logger = logging.getLogger("kb.app")


# ---------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------

@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Load the knowledge index at startup.

    A failed load is logged and the server keeps running with an empty
    index; POST /knowledge/refresh can be used once the directory is fixed.
    """
    logger.info("Starting kb-server")

    if settings.knowledge_enabled:
        provider = app.dependency_overrides.get(get_knowledge_index, get_knowledge_index)
        index = provider()
        try:
            count = await run_in_threadpool(index.load)
            logger.info("Knowledge base ready with %d documents", count)
        except KnowledgeLoadError:
            logger.exception("Failed to load knowledge base; serving empty index")
    else:
        logger.info("Knowledge base disabled by configuration")

    yield

    logger.info("Shutting down kb-server")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Build a fresh application with the knowledge error handlers and routers.

    Each call returns an independent app, so tests can install their own
    index through ``app.dependency_overrides[get_knowledge_index]``.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="kb-server",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(DocumentNotFoundError, document_not_found_handler)
    app.add_exception_handler(KnowledgeLoadError, knowledge_load_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(knowledge_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
