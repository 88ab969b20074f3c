"""
Query compiler - merges listing queries with data fragments.

For each entity type the identity-only listing operations get the type's data
fragment spread next to the identity spread, so one round trip returns both
identity and full data:

    query LIST_NodeArticle_EN($limit: Int, $offset: Int) {
      nodeQuery(limit: $limit, offset: $offset) {
        entities(language: EN) {
          ..._NodeArticleId_
          ...NodeArticle
        }
      }
    }

Usage:
    compiler = QueryCompiler(schema)
    documents = compiler.compile(descriptors, listing_queries, identity_fragments, fragments)
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable, Mapping, Optional

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    NameNode,
    OperationDefinitionNode,
    SelectionSetNode,
    print_ast,
    validate,
)

from .defs import (
    ENTITIES_FIELD,
    CompiledDocument,
    DataFragment,
    EntityTypeDescriptor,
    ListingQuery,
)
from .errors import DocumentValidationError, UnresolvedFragmentError
from .schema import RemoteSchema

logger = logging.getLogger(__name__)


class QueryCompiler:
    """
    Compiles one executable document per entity type.

    When constructed with a schema, every document is validated before any
    network call is made.
    """

    def __init__(self, schema: Optional[RemoteSchema] = None):
        self.schema = schema

    def compile(
        self,
        descriptors: Iterable[EntityTypeDescriptor],
        listing_queries: Mapping[str, list[ListingQuery]],
        identity_fragments: Mapping[str, FragmentDefinitionNode],
        data_fragments: Mapping[str, DataFragment],
    ) -> dict[str, CompiledDocument]:
        """
        Compile documents keyed by remote type name.

        Args:
            descriptors: Types to compile
            listing_queries: Listing queries per type name
            identity_fragments: Identity fragment per type name
            data_fragments: Data fragment per type name

        Returns:
            CompiledDocument per type, in descriptor order

        Raises:
            UnresolvedFragmentError: If a type lacks a fragment or listing queries
            DocumentValidationError: If a document fails schema validation
        """
        documents: dict[str, CompiledDocument] = {}

        for descriptor in descriptors:
            type_name = descriptor.remote_type_name

            fragment = data_fragments.get(type_name)
            if fragment is None:
                raise UnresolvedFragmentError(type_name)

            identity = identity_fragments.get(type_name)
            if identity is None:
                raise UnresolvedFragmentError(
                    type_name, f"No identity fragment for type '{type_name}'"
                )

            queries = listing_queries.get(type_name)
            if not queries:
                raise UnresolvedFragmentError(
                    type_name, f"No listing queries for type '{type_name}'"
                )

            documents[type_name] = self._compile_type(descriptor, queries, identity, fragment)

        logger.info(f"Compiled {len(documents)} documents")
        return documents

    def _compile_type(
        self,
        descriptor: EntityTypeDescriptor,
        queries: list[ListingQuery],
        identity: FragmentDefinitionNode,
        fragment: DataFragment,
    ) -> CompiledDocument:
        operations = [self._merge(query.operation, fragment.name) for query in queries]
        document = DocumentNode(definitions=(*operations, identity, *fragment.definitions))

        if self.schema is not None:
            errors = validate(self.schema.graphql_schema, document)
            if errors:
                raise DocumentValidationError(
                    descriptor.remote_type_name,
                    [error.message for error in errors],
                )

        return CompiledDocument(
            remote_type_name=descriptor.remote_type_name,
            query_field_name=descriptor.query_field_name,
            document=document,
            operations={query.language: query.operation_name for query in queries},
            text=print_ast(document),
        )

    def _merge(self, operation: OperationDefinitionNode, fragment_name: str) -> OperationDefinitionNode:
        """Copy a listing operation, adding the data spread inside `entities`."""
        merged = copy.deepcopy(operation)
        entities = self._find_entities_field(merged)
        spread = FragmentSpreadNode(name=NameNode(value=fragment_name), directives=())
        entities.selection_set = SelectionSetNode(
            selections=(*entities.selection_set.selections, spread)
        )
        return merged

    def _find_entities_field(self, operation: OperationDefinitionNode) -> FieldNode:
        root = operation.selection_set.selections[0]
        for selection in root.selection_set.selections:
            if isinstance(selection, FieldNode) and selection.name.value == ENTITIES_FIELD:
                return selection
        raise UnresolvedFragmentError(
            operation.name.value,
            f"Listing operation '{operation.name.value}' has no `{ENTITIES_FIELD}` selection",
        )


def extract_fragment(document: DocumentNode, name: str) -> Optional[FragmentDefinitionNode]:
    """Find a fragment definition by name in a compiled document."""
    for definition in document.definitions:
        if isinstance(definition, FragmentDefinitionNode) and definition.name.value == name:
            return definition
    return None
