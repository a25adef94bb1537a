"""
API Models for the Knowledge Server

This module defines all Pydantic models used for request/response validation
across the knowledge search, listing and refresh endpoints.

Design Goals
------------
- Strong typing
- Safe defaults (no shared mutable state)
- Explicit response contracts
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, ConfigDict

from ..knowledge.models import Document


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def preview(text: str, max_chars: int) -> str:
    """Truncate *text* to *max_chars* characters, marking the cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


# ---------------------------------------------------------------------
# Search Models
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    """
    Vector or keyword search request.
    """
    query: str
    limit: Optional[int] = Field(default=None, ge=1, le=100)
    mode: Literal["vector", "keyword"] = "vector"

    model_config = ConfigDict(extra="forbid")


class SearchResult(BaseModel):
    """
    Individual search match.
    """
    id: str = Field(..., min_length=1)
    title: str
    score: float = Field(..., ge=0.0)
    text: str

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Document Models
# ---------------------------------------------------------------------

class SectionModel(BaseModel):
    title: str
    level: int = Field(..., ge=1)
    content: str

    model_config = ConfigDict(extra="forbid")


class DocumentSummary(BaseModel):
    """
    Listing entry for one document.
    """
    id: str
    title: str
    size: int = Field(..., ge=0)
    modified_at: datetime

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentSummary":
        return cls(
            id=doc.id,
            title=doc.title,
            size=doc.size,
            modified_at=doc.modified_at,
        )


class DocumentDetail(DocumentSummary):
    """
    Full document with its sections.
    """
    content: str
    sections: List[SectionModel] = Field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentDetail":
        return cls(
            id=doc.id,
            title=doc.title,
            size=doc.size,
            modified_at=doc.modified_at,
            content=doc.content,
            sections=[
                SectionModel(title=s.title, level=s.level, content=s.content)
                for s in doc.sections
            ],
        )


# ---------------------------------------------------------------------
# Administrative Models
# ---------------------------------------------------------------------

class RefreshResponse(BaseModel):
    """
    Result of a knowledge base refresh.
    """
    status: Literal["ok"] = "ok"
    count: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")


class KnowledgeStatsResponse(BaseModel):
    """
    Statistics for the knowledge index.
    """
    state: Literal["empty", "ready"]
    total_documents: int = Field(..., ge=0)
    vocabulary_size: int = Field(..., ge=0)
    directory: str
    loaded_at: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")
