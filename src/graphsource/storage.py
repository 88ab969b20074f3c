"""
File storage for fragments and compiled queries.

- FragmentStore: named fragment texts, one `<TypeName>.graphql` per type
- write_compiled_queries: write-only dump of compiled documents for inspection
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from .core.defs import CompiledDocument

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIX = ".graphql"


class FragmentStore:
    """
    Fragment cache addressed by remote type name.

    Without a directory the store only keeps texts in memory for the run.

    Usage:
        store = FragmentStore("src/drupal-fragments")
        text = store.read("NodeArticle")
        store.write("NodeArticle", "fragment NodeArticle on NodeArticle { ... }")
    """

    def __init__(self, directory: Path | str | None = None):
        self.directory = Path(directory) if directory else None
        self._memory: dict[str, str] = {}

    def _path(self, type_name: str) -> Path:
        return self.directory / f"{type_name}{FRAGMENT_SUFFIX}"

    def read(self, type_name: str) -> Optional[str]:
        """Return the cached fragment text for a type, or None."""
        if self.directory is None:
            return self._memory.get(type_name)

        path = self._path(type_name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, type_name: str, text: str) -> None:
        """Store the fragment text for a type."""
        if self.directory is None:
            self._memory[type_name] = text
            return

        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(type_name).write_text(text, encoding="utf-8")
        logger.debug(f"Wrote fragment {self._path(type_name)}")

    def names(self) -> list[str]:
        """Type names with a cached fragment."""
        if self.directory is None:
            return sorted(self._memory)
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{FRAGMENT_SUFFIX}"))


def write_compiled_queries(
    directory: Path | str,
    documents: Mapping[str, CompiledDocument],
) -> list[Path]:
    """
    Dump compiled documents, one file per remote type.

    Returns:
        Paths written
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for type_name, document in documents.items():
        path = directory / f"{type_name}{FRAGMENT_SUFFIX}"
        path.write_text(document.text, encoding="utf-8")
        written.append(path)

    logger.info(f"Wrote {len(written)} compiled queries to {directory}")
    return written
