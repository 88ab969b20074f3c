"""
Core module - schema, entity types, query synthesis and compilation.
"""

from __future__ import annotations

from .compiler import QueryCompiler, extract_fragment
from .defs import (
    ENTITIES_FIELD,
    ENTITY_QUERY_RESULT,
    IDENTITY_FIELDS,
    CompiledDocument,
    DataFragment,
    EntityRecord,
    EntityTypeDescriptor,
    ListingQuery,
    NodeDefinition,
)
from .errors import (
    ConfigurationError,
    DocumentValidationError,
    ExecutorError,
    FetchError,
    FragmentGenerationError,
    GraphQLResponseError,
    GraphSourceError,
    PaginationVariableMismatch,
    SchemaLoadError,
    SourcingCancelled,
    TransportError,
    UnresolvedFragmentError,
)
from .fragments import (
    DefaultFragmentGenerator,
    ResolvedFragments,
    parse_fragment,
    resolve_fragments,
)
from .query_types import GraphQLRequest, GraphQLResponse, QueryExecutor
from .resolver import find_entity_types, query_field_entity_type
from .schema import RemoteSchema, load_schema
from .synthesizer import QuerySynthesizer, build_identity_fragment, check_pagination_variables
from .utils import (
    flatten_selection,
    get_path,
    query_field_prefix,
    upper_first,
)

__all__ = [
    # Definitions
    "ENTITIES_FIELD",
    "ENTITY_QUERY_RESULT",
    "IDENTITY_FIELDS",
    "EntityTypeDescriptor",
    "ListingQuery",
    "DataFragment",
    "CompiledDocument",
    "NodeDefinition",
    "EntityRecord",
    # Errors
    "GraphSourceError",
    "ConfigurationError",
    "ExecutorError",
    "TransportError",
    "GraphQLResponseError",
    "SchemaLoadError",
    "PaginationVariableMismatch",
    "UnresolvedFragmentError",
    "DocumentValidationError",
    "FragmentGenerationError",
    "FetchError",
    "SourcingCancelled",
    # Wire types
    "GraphQLRequest",
    "GraphQLResponse",
    "QueryExecutor",
    # Schema
    "RemoteSchema",
    "load_schema",
    # Resolver
    "find_entity_types",
    "query_field_entity_type",
    # Synthesizer
    "QuerySynthesizer",
    "build_identity_fragment",
    "check_pagination_variables",
    # Fragments
    "DefaultFragmentGenerator",
    "ResolvedFragments",
    "parse_fragment",
    "resolve_fragments",
    # Compiler
    "QueryCompiler",
    "extract_fragment",
    # Utils
    "upper_first",
    "query_field_prefix",
    "flatten_selection",
    "get_path",
]
