"""
Vocabulary and IDF Construction

Builds the token -> index vocabulary and the inverse document frequency table
for a corpus in a single pass. Both are only meaningful for the exact corpus
they were built from and are always rebuilt together.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping

from .models import Document
from .tokenizer import tokenize


@dataclass(frozen=True)
class Vocabulary:
    """
    Dense token index plus IDF weights for one corpus.

    Attributes
    ----------
    index:
        Token -> vector position, assigned in first-seen order.
    idf:
        Token -> ``ln(total_docs / document_frequency)``.
    total_docs:
        Number of documents the tables were derived from.
    """

    index: Mapping[str, int] = field(default_factory=dict)
    idf: Mapping[str, float] = field(default_factory=dict)
    total_docs: int = 0

    def __len__(self) -> int:
        return len(self.index)

    def __contains__(self, token: object) -> bool:
        return token in self.index


def build_vocabulary(documents: Iterable[Document]) -> Vocabulary:
    """
    Build the vocabulary and IDF table for *documents*.

    Documents are scanned in the order given; callers that need stable
    indices across rebuilds must pass a stable order. A token occurring
    several times in one document counts once toward its document frequency.
    An empty corpus yields an empty vocabulary.
    """
    index: Dict[str, int] = {}
    doc_freq: Dict[str, int] = {}
    total_docs = 0

    for doc in documents:
        total_docs += 1
        seen = set()
        for token in tokenize(doc.content):
            if token not in index:
                index[token] = len(index)
            if token not in seen:
                seen.add(token)
                doc_freq[token] = doc_freq.get(token, 0) + 1

    idf = {
        token: math.log(total_docs / df)
        for token, df in doc_freq.items()
    }

    return Vocabulary(index=index, idf=idf, total_docs=total_docs)
