"""
Knowledge Package

Loads a directory of Markdown-style documents and serves TF-IDF vector search
and keyword search over them.
"""

from .index import KnowledgeIndex, IndexState, SearchMode, SearchHit, Generation
from .loader import DocumentLoader
from .models import Document, Section

__all__ = [
    "KnowledgeIndex",
    "IndexState",
    "SearchMode",
    "SearchHit",
    "Generation",
    "DocumentLoader",
    "Document",
    "Section",
]
