"""
Text Tokenizer

Normalizes arbitrary text into the token stream used by both the vocabulary
builder and the vector encoder. The function is pure and safe to call from
any number of threads.
"""

from __future__ import annotations

from typing import List

# Characters treated as token separators in addition to plain spaces.
_SEPARATORS = ".,;:!?()[]{}\"'-_\n\t\r"
_SEPARATOR_TABLE = str.maketrans({ch: " " for ch in _SEPARATORS})

# Measured in UTF-8 bytes, so a single CJK character already qualifies.
MIN_TOKEN_BYTES = 3


def tokenize(text: str) -> List[str]:
    """
    Split *text* into lowercase tokens.

    Tokens shorter than three UTF-8 bytes and purely numeric tokens are
    dropped. An empty string yields an empty list.
    """
    words = text.lower().translate(_SEPARATOR_TABLE).split()
    return [
        word
        for word in words
        if len(word.encode("utf-8")) >= MIN_TOKEN_BYTES and not _is_number(word)
    ]


def _is_number(word: str) -> bool:
    return word.isascii() and word.isdigit()
