"""
Vector Encoder

Converts text into TF-IDF weighted vectors aligned to a :class:`Vocabulary`.

Encoders are reached through the :class:`TextEncoder` protocol so that a
learned embedding model can replace TF-IDF without touching the index.

Known Limitation
----------------
Tokens that are not in the vocabulary are ignored: a query can never grow
the vector space, so words that appear only in queries (or in documents added
after the last build) contribute nothing. A full refresh of the index is the
remedy.
"""

from __future__ import annotations

from collections import Counter
from typing import Protocol

import numpy as np

from .tokenizer import tokenize
from .vocabulary import Vocabulary


class TextEncoder(Protocol):
    """Anything that maps text to a fixed-length float vector."""

    def encode(self, text: str) -> np.ndarray: ...


def encode(text: str, vocabulary: Vocabulary) -> np.ndarray:
    """
    Encode *text* as a TF-IDF vector of length ``len(vocabulary)``.

    Term frequency is length-normalized (``count / total_tokens``). Text
    with no tokens encodes to the zero vector.
    """
    vector = np.zeros(len(vocabulary), dtype=np.float64)

    tokens = tokenize(text)
    if not tokens:
        return vector

    total = len(tokens)
    for token, count in Counter(tokens).items():
        idx = vocabulary.index.get(token)
        if idx is None:
            continue
        vector[idx] = (count / total) * vocabulary.idf[token]

    return vector


class TfidfEncoder:
    """
    TF-IDF encoder bound to one vocabulary generation.
    """

    def __init__(self, vocabulary: Vocabulary) -> None:
        self.vocabulary = vocabulary

    @property
    def dimension(self) -> int:
        return len(self.vocabulary)

    def encode(self, text: str) -> np.ndarray:
        return encode(text, self.vocabulary)
