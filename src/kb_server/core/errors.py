"""
Error Taxonomy and Global Error Handling

This module defines the knowledge engine's exception hierarchy and the
application-wide exception handlers that translate it into HTTP responses.

Taxonomy
--------
- KnowledgeLoadError     : the document directory could not be read. Fatal to
                           that load; the previously published index is kept.
- DocumentParseError     : a single file could not be read or decoded. The
                           loader logs it and skips the file.
- DocumentNotFoundError  : lookup of an unknown document id. A normal outcome,
                           never logged as a fault.

Every handler answers with a JSON body whose "error" key names the failure.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("kb.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class KnowledgeError(Exception):
    """Base error for knowledge engine failures."""


class KnowledgeLoadError(KnowledgeError, IOError):
    """Raised when the knowledge directory cannot be created or walked."""


class DocumentParseError(KnowledgeError):
    """Raised when a single document cannot be read or decoded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


class DocumentNotFoundError(KnowledgeError, LookupError):
    """Raised when a document id is absent from the current index."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"document not found: {doc_id}")
        self.doc_id = doc_id


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def document_not_found_handler(
    request: Request,
    exc: DocumentNotFoundError,
) -> JSONResponse:
    """
    Map an unknown document id to a 404 response.
    """
    logger.debug("Document lookup miss: %s", exc.doc_id)

    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "detail": str(exc)},
    )


async def knowledge_load_error_handler(
    request: Request,
    exc: KnowledgeLoadError,
) -> JSONResponse:
    """
    Map a failed (re)load to a 503 response.

    The index keeps serving its previous generation, so the condition is
    reported as temporary and the caller may retry.
    """
    logger.error(
        "Knowledge load failed during request %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )

    return JSONResponse(
        status_code=503,
        content={
            "error": "knowledge_load_failed",
            "detail": "Knowledge base could not be loaded",
        },
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Turn any exception no other handler claimed into an opaque 500.

    The traceback goes to the ``kb.errors`` log; the client only learns that
    the request failed.
    """
    logger.exception(
        "Unexpected failure in %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error"},
    )
