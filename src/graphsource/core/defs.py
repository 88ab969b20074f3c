"""
Core dataclass definitions for graphsource.

These describe sourced entity types, the queries synthesized for them and the
records streamed out of the pagination engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from graphql import DocumentNode, FragmentDefinitionNode, OperationDefinitionNode, print_ast

from .utils import get_path


# Fields selected by every identity fragment, as dotted paths
IDENTITY_FIELDS = ("__typename", "entityId", "entityLanguage.id")

# Root field convention of the remote API
ENTITY_QUERY_RESULT = "EntityQueryResult"
ENTITIES_FIELD = "entities"


@dataclass(frozen=True)
class EntityTypeDescriptor:
    """A concrete remote type sourced through one paginated query field."""
    remote_type_name: str
    query_field_name: str
    supported_languages: tuple[str, ...] = ("EN",)
    is_interface: bool = False  # reached by expanding an interface/union query field
    interface_name: Optional[str] = None

    @property
    def identity_fragment_name(self) -> str:
        return f"_{self.remote_type_name}Id_"


@dataclass(frozen=True)
class ListingQuery:
    """Identity-only listing operation for one (type, language) pair."""
    remote_type_name: str
    language: str
    operation: OperationDefinitionNode
    variable_names: tuple[str, ...] = ("limit", "offset")

    @property
    def operation_name(self) -> str:
        return self.operation.name.value

    @property
    def text(self) -> str:
        return print_ast(self.operation)


@dataclass(frozen=True)
class DataFragment:
    """
    Field selection fetched for every entity of a remote type.

    `definitions` holds every fragment parsed from `text`; the fragment named
    `name` comes first and is the one spread into listing queries.
    """
    remote_type_name: str
    name: str
    definitions: tuple[FragmentDefinitionNode, ...]
    text: str
    source: Literal["custom", "cache", "generated"] = "generated"


@dataclass(frozen=True)
class CompiledDocument:
    """Executable document for one remote type, one operation per language."""
    remote_type_name: str
    query_field_name: str
    document: DocumentNode
    operations: dict[str, str]  # language -> operation name
    text: str

    def operation_name(self, language: str) -> str:
        return self.operations[language]


@dataclass(frozen=True)
class NodeDefinition:
    """How a sourced type is stored by a node sink."""
    descriptor: EntityTypeDescriptor
    node_type_name: str
    document: CompiledDocument
    remote_id_fields: tuple[str, ...] = IDENTITY_FIELDS

    @property
    def remote_type_name(self) -> str:
        return self.descriptor.remote_type_name


@dataclass(frozen=True)
class EntityRecord:
    """
    Raw entity payload as decoded from one page.

    Opaque apart from its identity: `__typename`, `entityId` and
    `entityLanguage.id`. The listing language is kept as a fallback for
    payloads whose language selection came back null.
    """
    remote_type_name: str
    language: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def typename(self) -> Optional[str]:
        return self.data.get("__typename")

    @property
    def entity_id(self) -> Any:
        return self.data.get("entityId")

    @property
    def entity_language(self) -> str:
        return get_path(self.data, "entityLanguage.id") or self.language

    @property
    def identity(self) -> tuple[Optional[str], Any, str]:
        return (self.typename, self.entity_id, self.entity_language)

    @property
    def node_id(self) -> str:
        return ":".join(str(part) for part in self.identity)
