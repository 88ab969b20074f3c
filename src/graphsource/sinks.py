"""
Node sinks - receivers of sourced entity records.

The engine only guarantees a stable identity per record (`__typename`,
`entityId`, language); deduplication and updates across runs belong to the
sink.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import IO, Optional, Protocol, runtime_checkable

from .core.defs import EntityRecord, NodeDefinition

logger = logging.getLogger(__name__)


@runtime_checkable
class NodeSink(Protocol):
    """Storage side of a sourcing run."""

    def declare(self, definition: NodeDefinition) -> None:
        """Announce a node type and its identity fields before any record."""
        ...

    def emit(self, definition: NodeDefinition, record: EntityRecord) -> None:
        """Receive one record of a declared type."""
        ...


class InMemoryNodeSink:
    """
    Keeps nodes in memory, keyed by node id.

    A record with an identity seen before replaces the earlier one.
    """

    def __init__(self):
        self.definitions: dict[str, NodeDefinition] = {}
        self.nodes: dict[str, tuple[NodeDefinition, EntityRecord]] = {}
        self.emitted = 0

    def declare(self, definition: NodeDefinition) -> None:
        self.definitions[definition.remote_type_name] = definition

    def emit(self, definition: NodeDefinition, record: EntityRecord) -> None:
        self.emitted += 1
        self.nodes[record.node_id] = (definition, record)

    def records(self, type_name: Optional[str] = None) -> list[EntityRecord]:
        """Stored records, optionally of one remote type."""
        return [
            record
            for definition, record in self.nodes.values()
            if type_name is None or definition.remote_type_name == type_name
        ]


class JsonLinesNodeSink:
    """
    Writes one JSON object per record to a file, replacing earlier contents.

    The file is truncated on the first declared type, or on close when
    nothing was declared, so a run without records leaves an empty file.

    Line format:
        {"type": "DrupalNodeArticle", "id": "NodeArticle:1:en", "data": {...}}
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self.definitions: dict[str, NodeDefinition] = {}
        self._file: IO[str] | None = None
        self._closed = False

    def _get_file(self) -> IO[str]:
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("w", encoding="utf-8")
        return self._file

    def declare(self, definition: NodeDefinition) -> None:
        self.definitions[definition.remote_type_name] = definition
        self._get_file()

    def emit(self, definition: NodeDefinition, record: EntityRecord) -> None:
        line = {
            "type": definition.node_type_name,
            "id": record.node_id,
            "data": record.data,
        }
        self._get_file().write(json.dumps(line, ensure_ascii=False, default=str) + "\n")

    def close(self) -> None:
        if self._closed:
            return
        self._get_file().close()
        self._file = None
        self._closed = True
        logger.info(f"Wrote nodes to {self.path}")
