"""
Knowledge Data Models

This module defines the canonical data model for documents loaded from the
knowledge directory.

Instances are immutable: every load produces a fresh set of documents and
the previous set is replaced wholesale, never edited in place.
"""

from __future__ import annotations

from datetime import datetime
from typing import Tuple

from pydantic import BaseModel, Field, ConfigDict


class Section(BaseModel):
    """
    One heading-delimited part of a document.
    """

    title: str = Field(
        ...,
        description="Heading text with the leading '#' run removed.",
    )

    level: int = Field(
        ...,
        ge=1,
        description="Heading level, i.e. the number of leading '#' characters.",
    )

    content: str = Field(
        default="",
        description="Non-heading lines up to the next heading.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class Document(BaseModel):
    """
    A single knowledge document.

    This model is the authoritative schema for:
    - The in-memory knowledge index
    - Vector and keyword search results
    - API document listings
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Path relative to the knowledge root, extension stripped, "
                    "separators replaced with '_'.",
    )

    title: str = Field(
        ...,
        description="First level-1 heading, else the humanized file name.",
    )

    content: str = Field(
        default="",
        description="Raw file text.",
    )

    path: str = Field(
        ...,
        description="Filesystem path the document was read from.",
    )

    modified_at: datetime = Field(
        ...,
        description="File modification time (UTC).",
    )

    sections: Tuple[Section, ...] = Field(
        default=(),
        description="Sections in file order.",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    @property
    def size(self) -> int:
        return len(self.content)
