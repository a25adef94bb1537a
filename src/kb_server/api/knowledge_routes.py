"""
Knowledge Routes

This module exposes the knowledge index to the surrounding service:
listing and inspecting documents, running vector or keyword searches, and
triggering a full refresh from the knowledge directory.

Handlers are plain functions: index operations block on local filesystem
and CPU work, so FastAPI runs them in its worker thread pool.
"""

from typing import List, Annotated

from fastapi import APIRouter, Depends, status

from .models import (
    SearchRequest,
    SearchResult,
    DocumentSummary,
    DocumentDetail,
    RefreshResponse,
    KnowledgeStatsResponse,
    preview,
)
from .dependencies import get_knowledge_index
from ..config import settings
from ..knowledge.index import KnowledgeIndex, SearchMode

router = APIRouter(prefix="/knowledge", tags=["knowledge"])

Index = Annotated[KnowledgeIndex, Depends(get_knowledge_index)]


@router.get(
    "/",
    response_model=List[DocumentSummary],
    summary="List loaded documents",
)
def list_documents(index: Index) -> List[DocumentSummary]:
    return [DocumentSummary.from_document(doc) for doc in index.get_all()]


@router.get(
    "/stats",
    response_model=KnowledgeStatsResponse,
    summary="Knowledge index statistics",
)
def get_stats(index: Index) -> KnowledgeStatsResponse:
    return KnowledgeStatsResponse(**index.get_stats())


@router.get(
    "/{doc_id}",
    response_model=DocumentDetail,
    summary="Fetch one document by id",
)
def get_document(doc_id: str, index: Index) -> DocumentDetail:
    # DocumentNotFoundError is translated to 404 by the global handler.
    return DocumentDetail.from_document(index.get_by_id(doc_id))


@router.post(
    "/search",
    response_model=List[SearchResult],
    summary="Vector or keyword search",
    status_code=status.HTTP_200_OK,
)
def search(req: SearchRequest, index: Index) -> List[SearchResult]:
    """
    Search the knowledge index.

    Parameters
    ----------
    req : SearchRequest
        Contains:
        - query: Search query string
        - limit: Maximum number of results (index default when omitted)
        - mode: "vector" (TF-IDF cosine) or "keyword" (literal occurrences)

    Returns
    -------
    List[SearchResult]
        Ranked results with content previews.
    """
    hits = index.search(req.query, limit=req.limit, mode=SearchMode(req.mode))

    return [
        SearchResult(
            id=hit.document.id,
            title=hit.document.title,
            score=hit.score,
            text=preview(hit.document.content, settings.preview_chars),
        )
        for hit in hits
    ]


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Rebuild the index from the knowledge directory",
)
def refresh(index: Index) -> RefreshResponse:
    # KnowledgeLoadError is translated to 503 by the global handler.
    count = index.refresh()
    return RefreshResponse(count=count)
