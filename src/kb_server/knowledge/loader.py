"""
Document Loader

This module walks a knowledge directory, reads every recognised text file and
turns it into an immutable :class:`Document` with its heading structure.

Failure Semantics
-----------------
- The root directory is created when it does not exist.
- A root that cannot be created or walked raises KnowledgeLoadError and the
  whole load fails.
- A single file that cannot be read or decoded is logged and skipped; the
  remaining files still load.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import Document, Section
from ..config import settings
from ..core.errors import DocumentParseError, KnowledgeLoadError

logger = logging.getLogger("kb.loader")


# ---------------------------------------------------------------------
# Heading Parser
# ---------------------------------------------------------------------

def parse_sections(content: str) -> Tuple[Optional[str], Tuple[Section, ...]]:
    """
    Extract the title and sections from Markdown-style text.

    A line whose stripped text begins with ``#`` opens a new section whose
    level is the length of the ``#`` run. Following non-heading lines belong
    to that section until the next heading. Text before the first heading is
    not part of any section. Lines may end in LF or CRLF; section
    bodies are always joined with LF.

    Returns
    -------
    (title, sections)
        ``title`` is the text of the first level-1 heading, or None.
    """
    title: Optional[str] = None
    sections: List[Section] = []

    current: Optional[Tuple[str, int]] = None
    body: List[str] = []

    def close() -> None:
        if current is not None:
            sections.append(
                Section(title=current[0], level=current[1], content="\n".join(body))
            )

    for line in content.splitlines():
        stripped = line.strip()

        if stripped.startswith("#"):
            heading = stripped.lstrip("#")
            if not heading:
                # A bare run of '#' is neither a heading nor body text.
                continue

            level = len(stripped) - len(heading)
            heading = heading.strip()

            if level == 1 and title is None:
                title = heading

            close()
            current = (heading, level)
            body = []

        elif current is not None:
            if not body and not line:
                continue
            body.append(line)

    close()
    return title, tuple(sections)


def humanize_filename(path: Path) -> str:
    """Turn ``getting-started_guide.md`` into ``getting started guide``."""
    return path.stem.replace("_", " ").replace("-", " ")


def document_id(root: Path, path: Path) -> str:
    """
    Derive the stable document id for *path* below *root*.

    The relative path loses its extension and every path separator becomes
    an underscore, so ``guides/setup.md`` maps to ``guides_setup``.
    """
    rel = path.relative_to(root).with_suffix("")
    return "_".join(rel.parts)


# ---------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------

class DocumentLoader:
    """
    Loads every recognised document below a root directory.

    The loader holds no state between calls and can be shared freely.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None) -> None:
        """
        Parameters
        ----------
        extensions : Optional[Iterable[str]]
            File suffixes to accept (case-insensitive, with leading dot).
            Defaults to settings.extension_set.
        """
        if extensions is None:
            self.extensions = settings.extension_set
        else:
            self.extensions = frozenset(e.lower() for e in extensions)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, directory: os.PathLike | str) -> Dict[str, Document]:
        """
        Load all documents below *directory*.

        Returns
        -------
        Dict[str, Document]
            Documents keyed by id, inserted in sorted path order.

        Raises
        ------
        KnowledgeLoadError
            If the directory cannot be created or walked.
        """
        root = Path(directory)
        logger.info("Loading knowledge base from %s", root)

        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise KnowledgeLoadError(
                f"Failed to create knowledge directory {root}: {exc}"
            ) from exc

        if not root.is_dir():
            raise KnowledgeLoadError(f"Knowledge path is not a directory: {root}")

        documents: Dict[str, Document] = {}

        for path in self._walk(root):
            try:
                doc = self.load_document(root, path)
            except DocumentParseError as exc:
                logger.warning("Skipping document %s: %s", exc.path, exc.reason)
                continue

            if doc.id in documents:
                logger.warning(
                    "Document id %s from %s replaces %s",
                    doc.id,
                    path,
                    documents[doc.id].path,
                )

            documents[doc.id] = doc
            logger.debug("Loaded document id=%s title=%r path=%s", doc.id, doc.title, path)

        logger.info("Knowledge base loaded: %d documents", len(documents))
        return documents

    def load_document(self, root: Path, path: Path) -> Document:
        """
        Read and parse one file.

        Raises
        ------
        DocumentParseError
            If the file cannot be read or is not valid UTF-8.
        """
        try:
            content = path.read_text(encoding="utf-8")
            stat = path.stat()
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentParseError(str(path), str(exc)) from exc

        title, sections = parse_sections(content)

        return Document(
            id=document_id(root, path),
            title=title if title is not None else humanize_filename(path),
            content=content,
            path=str(path),
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            sections=sections,
        )

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _walk(self, root: Path) -> Iterator[Path]:
        """
        Yield candidate files below *root* in a deterministic order.
        """

        def _raise(exc: OSError) -> None:
            raise KnowledgeLoadError(
                f"Failed to walk knowledge directory {root}: {exc}"
            ) from exc

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.suffix.lower() in self.extensions:
                    yield path
