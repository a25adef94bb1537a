"""
Knowledge Index

This module owns the searchable state of the knowledge engine: the loaded
documents, their vocabulary and IDF table, and one vector per document.

Key Properties
--------------
- All four pieces form one immutable Generation, built off to the side and
  published with a single reference swap
- Builds are serialized by a lock and always run to completion
- Readers never wait for a build; they see the last published generation
- A failed load leaves the previous generation (and directory) untouched
- Encoder and ranker are pluggable, so a learned embedding model can
  replace TF-IDF without changing this class
"""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Callable, Dict, List, Mapping, Optional, Union

import numpy as np

from .encoder import TextEncoder, TfidfEncoder
from .keyword import keyword_search
from .loader import DocumentLoader
from .models import Document
from .ranker import CosineRanker, Ranker
from .vocabulary import Vocabulary, build_vocabulary
from ..config import settings
from ..core.errors import DocumentNotFoundError

logger = logging.getLogger("kb.index")

PathLike = Union[str, Path]
EncoderFactory = Callable[[Vocabulary], TextEncoder]


# ---------------------------------------------------------------------
# State
# ---------------------------------------------------------------------

class IndexState(str, enum.Enum):
    EMPTY = "empty"
    READY = "ready"


class SearchMode(str, enum.Enum):
    """Relevance strategy selected by the caller."""

    VECTOR = "vector"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class Generation:
    """
    One consistent snapshot of the index.
    """

    documents: Mapping[str, Document]
    vocabulary: Vocabulary
    vectors: Mapping[str, np.ndarray]
    encoder: TextEncoder
    directory: Path
    loaded_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


@dataclass(frozen=True)
class SearchHit:
    document: Document
    score: float


# ---------------------------------------------------------------------
# Knowledge Index
# ---------------------------------------------------------------------

class KnowledgeIndex:
    """
    In-memory document index with vector and keyword search.

    Several independent instances may coexist; nothing is shared at module
    level.
    """

    def __init__(
        self,
        directory: Optional[PathLike] = None,
        loader: Optional[DocumentLoader] = None,
        encoder_factory: EncoderFactory = TfidfEncoder,
        ranker: Optional[Ranker] = None,
        build_workers: Optional[int] = None,
        default_limit: Optional[int] = None,
    ) -> None:
        """
        Parameters
        ----------
        directory : Optional[PathLike]
            Directory used by load() and refresh() when none is given.
            Defaults to settings.knowledge_dir.

        loader : Optional[DocumentLoader]
            Document loader. Defaults to one using settings.extension_set.

        encoder_factory : EncoderFactory
            Builds the encoder for a freshly built vocabulary.

        ranker : Optional[Ranker]
            Vector ranker. Defaults to CosineRanker(settings.similarity_threshold).

        build_workers : Optional[int]
            Threads used to encode documents during a build.
            Defaults to settings.build_workers.

        default_limit : Optional[int]
            Result cap when search() is called without a limit.
            Defaults to settings.default_search_limit.
        """
        self._directory = Path(directory or settings.knowledge_dir)
        self._loader = loader or DocumentLoader()
        self._encoder_factory = encoder_factory
        self._ranker = ranker or CosineRanker(settings.similarity_threshold)
        self._build_workers = build_workers or settings.build_workers
        self._default_limit = default_limit or settings.default_search_limit

        self._generation: Optional[Generation] = None
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> IndexState:
        return IndexState.EMPTY if self._generation is None else IndexState.READY

    @property
    def directory(self) -> Path:
        return self._directory

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def load(self, directory: Optional[PathLike] = None) -> int:
        """
        Load *directory* and publish a new generation.

        Returns the number of documents in the new generation.

        Raises
        ------
        KnowledgeLoadError
            If the directory cannot be read. The previous generation stays
            in place.
        """
        root = Path(directory) if directory is not None else self._directory

        with self._lock:
            documents = self._loader.load(root)
            generation = self._build(root, documents)

            self._generation = generation
            self._directory = root

        logger.info(
            "Published knowledge generation: %d documents, %d terms",
            len(generation.documents),
            len(generation.vocabulary),
        )
        return len(generation.documents)

    def refresh(self) -> int:
        """
        Reload the most recently loaded directory.
        """
        return self.load(self._directory)

    def _build(self, root: Path, loaded: Dict[str, Document]) -> Generation:
        documents = {doc_id: loaded[doc_id] for doc_id in sorted(loaded)}

        vocabulary = build_vocabulary(documents.values())
        encoder = self._encoder_factory(vocabulary)

        contents = [doc.content for doc in documents.values()]
        if self._build_workers > 1 and len(contents) > 1:
            with ThreadPoolExecutor(max_workers=self._build_workers) as pool:
                encoded = list(pool.map(encoder.encode, contents))
        else:
            encoded = [encoder.encode(text) for text in contents]

        vectors = dict(zip(documents.keys(), encoded))
        logger.debug("Encoded %d document vectors", len(vectors))

        return Generation(
            documents=documents,
            vocabulary=vocabulary,
            vectors=vectors,
            encoder=encoder,
            directory=root,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        query: str,
        limit: Optional[int] = None,
        mode: SearchMode = SearchMode.VECTOR,
    ) -> List[SearchHit]:
        """
        Search the current generation.

        Parameters
        ----------
        query : str
            Free-text query. Blank queries return no results.

        limit : Optional[int]
            Maximum number of hits. Defaults to the index default limit.
            A limit below 1 yields no hits.

        mode : SearchMode
            VECTOR ranks by TF-IDF cosine similarity; KEYWORD counts literal
            occurrences of the query string.

        Returns
        -------
        List[SearchHit]
            Hits ordered by descending score.
        """
        if limit is None:
            limit = self._default_limit
        generation = self._generation
        if generation is None or limit < 1 or not query.strip():
            return []

        mode = SearchMode(mode)
        if mode is SearchMode.KEYWORD:
            return [
                SearchHit(document=doc, score=score)
                for doc, score in keyword_search(
                    generation.documents.values(), query, limit
                )
            ]

        query_vector = generation.encoder.encode(query)
        ranked = self._ranker.rank(query_vector, generation.vectors, limit)

        return [
            SearchHit(document=generation.documents[doc_id], score=score)
            for doc_id, score in ranked
        ]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_all(self) -> List[Document]:
        """Return every document of the current generation, sorted by id."""
        generation = self._generation
        if generation is None:
            return []
        return list(generation.documents.values())

    def get_by_id(self, doc_id: str) -> Document:
        """
        Return the document with id *doc_id*.

        Raises
        ------
        DocumentNotFoundError
            If the id is not part of the current generation.
        """
        generation = self._generation
        if generation is None or doc_id not in generation.documents:
            raise DocumentNotFoundError(doc_id)
        return generation.documents[doc_id]

    def get_stats(self) -> dict:
        """
        Return index statistics for diagnostics.
        """
        generation = self._generation
        if generation is None:
            return {
                "state": IndexState.EMPTY.value,
                "total_documents": 0,
                "vocabulary_size": 0,
                "directory": str(self._directory),
                "loaded_at": None,
            }

        return {
            "state": IndexState.READY.value,
            "total_documents": len(generation.documents),
            "vocabulary_size": len(generation.vocabulary),
            "directory": str(generation.directory),
            "loaded_at": generation.loaded_at,
        }
