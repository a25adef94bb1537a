"""
Keyword Search Strategy

Scores documents by literal, case-insensitive occurrences of the whole query
string. Title and section-title hits weigh more than body hits.

This is a separate relevance definition from vector search and is selected
explicitly by callers; the two are never blended.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import Document

TITLE_WEIGHT = 10
SECTION_TITLE_WEIGHT = 5


def keyword_score(doc: Document, query: str) -> int:
    """
    Score *doc* for an already-lowercased, non-empty *query*.

    +10 when the title contains the query, +1 for every occurrence in the
    content, +5 for every section whose title contains it.
    """
    score = 0

    if query in doc.title.lower():
        score += TITLE_WEIGHT

    score += doc.content.lower().count(query)

    for section in doc.sections:
        if query in section.title.lower():
            score += SECTION_TITLE_WEIGHT

    return score


def keyword_search(
    documents: Iterable[Document],
    query: str,
    limit: int,
) -> List[Tuple[Document, float]]:
    """
    Return up to *limit* ``(document, score)`` pairs with a positive score,
    highest score first. A blank query matches nothing.
    """
    needle = query.lower()
    if not needle.strip() or limit < 1:
        return []

    scored: List[Tuple[Document, float]] = []
    for doc in documents:
        score = keyword_score(doc, needle)
        if score > 0:
            scored.append((doc, float(score)))

    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:limit]
