"""
Similarity Ranker

Scores corpus vectors against a query vector by cosine similarity and returns
the best matches above a relevance threshold.

The threshold is an exclusive lower bound: a score exactly equal to it is
dropped. Ordering among equal scores follows corpus iteration order and is
not part of the contract.
"""

from __future__ import annotations

from typing import List, Mapping, Protocol, Tuple

import numpy as np

DEFAULT_THRESHOLD = 0.1

RankedList = List[Tuple[str, float]]


class Ranker(Protocol):
    """Anything that orders corpus entries by relevance to a query vector."""

    def rank(
        self,
        query_vector: np.ndarray,
        corpus: Mapping[str, np.ndarray],
        limit: int,
    ) -> RankedList: ...


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """
    Cosine similarity of *a* and *b*.

    Returns 0.0 when either vector has zero norm or the lengths differ.
    """
    if a.shape != b.shape:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(a, b)) / (norm_a * norm_b)


def rank(
    query_vector: np.ndarray,
    document_vectors: Mapping[str, np.ndarray],
    limit: int,
    threshold: float = DEFAULT_THRESHOLD,
) -> RankedList:
    """
    Return up to *limit* ``(doc_id, score)`` pairs, highest score first.

    Only entries scoring strictly above *threshold* are kept.
    """
    if limit < 1:
        return []

    scored: RankedList = []
    for doc_id, vector in document_vectors.items():
        score = cosine(query_vector, vector)
        if score > threshold:
            scored.append((doc_id, score))

    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:limit]


class CosineRanker:
    """
    Cosine ranker with a fixed relevance threshold.
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        self.threshold = threshold

    def rank(
        self,
        query_vector: np.ndarray,
        corpus: Mapping[str, np.ndarray],
        limit: int,
    ) -> RankedList:
        return rank(query_vector, corpus, limit, self.threshold)
