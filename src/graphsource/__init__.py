"""
graphsource - incremental GraphQL sourcing of Drupal entities.

Discovers paginated entity collections in a remote GraphQL schema, compiles
one query per entity type and pages through every type into a node sink.

Usage:
    import asyncio
    from graphsource import InMemoryNodeSink, SourcingConfig, SourcingOrchestrator

    config = SourcingConfig(url="https://drupal.example.com/graphql", languages=["EN", "ES"])
    sink = InMemoryNodeSink()
    report = asyncio.run(SourcingOrchestrator(config, sink=sink).run())
"""

from __future__ import annotations

from .config import SourcingConfig, load_config
from .core import (
    CompiledDocument,
    ConfigurationError,
    DataFragment,
    DefaultFragmentGenerator,
    DocumentValidationError,
    EntityRecord,
    EntityTypeDescriptor,
    ExecutorError,
    FetchError,
    FragmentGenerationError,
    GraphQLRequest,
    GraphQLResponse,
    GraphQLResponseError,
    GraphSourceError,
    ListingQuery,
    NodeDefinition,
    PaginationVariableMismatch,
    QueryCompiler,
    QueryExecutor,
    QuerySynthesizer,
    RemoteSchema,
    SchemaLoadError,
    SourcingCancelled,
    TransportError,
    UnresolvedFragmentError,
    find_entity_types,
    load_schema,
    resolve_fragments,
)
from .runtime import (
    HttpQueryExecutor,
    LimitOffsetAdapter,
    PaginationAdapter,
    PaginationState,
    SourcingOrchestrator,
    SourcingPlan,
    SourcingReport,
    TypeReport,
    fetch_all,
    paginate,
)
from .sinks import InMemoryNodeSink, JsonLinesNodeSink, NodeSink
from .storage import FragmentStore, write_compiled_queries

__version__ = "0.1.0"

__all__ = [
    # Config
    "SourcingConfig",
    "load_config",
    # Definitions
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
    # Pipeline
    "GraphQLRequest",
    "GraphQLResponse",
    "QueryExecutor",
    "RemoteSchema",
    "load_schema",
    "find_entity_types",
    "QuerySynthesizer",
    "DefaultFragmentGenerator",
    "resolve_fragments",
    "QueryCompiler",
    # Runtime
    "HttpQueryExecutor",
    "PaginationState",
    "PaginationAdapter",
    "LimitOffsetAdapter",
    "paginate",
    "fetch_all",
    "SourcingOrchestrator",
    "SourcingPlan",
    "SourcingReport",
    "TypeReport",
    # Sinks and storage
    "NodeSink",
    "InMemoryNodeSink",
    "JsonLinesNodeSink",
    "FragmentStore",
    "write_compiled_queries",
]
