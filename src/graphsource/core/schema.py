"""
Remote schema - one-time decode of the introspected type system.

Wraps `graphql.GraphQLSchema` behind the few typed accessors the rest of the
engine needs, so no component reflects over schema objects ad hoc.

Usage:
    schema = await load_schema(executor)
    for name, field in schema.query_fields().items():
        ...
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from graphql import (
    GraphQLError,
    GraphQLField,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    build_client_schema,
    get_introspection_query,
    is_abstract_type,
)

from .errors import ExecutorError, SchemaLoadError
from .query_types import GraphQLRequest, QueryExecutor

logger = logging.getLogger(__name__)

INTROSPECTION_OPERATION = "IntrospectionQuery"


class RemoteSchema:
    """
    Read-only view over the remote GraphQL schema.

    Shared by every component of a run; never mutated after construction.
    """

    def __init__(self, graphql_schema: GraphQLSchema):
        if graphql_schema.query_type is None:
            raise SchemaLoadError("Remote schema has no query root type")
        self.graphql_schema = graphql_schema

    @classmethod
    def from_introspection(cls, introspection: dict[str, Any]) -> "RemoteSchema":
        """
        Build from an introspection result (`{"__schema": {...}}`).

        Raises:
            SchemaLoadError: If the payload is not a valid introspection result
        """
        if not isinstance(introspection, dict) or "__schema" not in introspection:
            raise SchemaLoadError("Introspection result is missing `__schema`")
        try:
            return cls(build_client_schema(introspection))
        except (GraphQLError, AttributeError, KeyError, TypeError, ValueError) as e:
            raise SchemaLoadError(f"Invalid introspection result: {e}") from e

    def query_fields(self) -> dict[str, GraphQLField]:
        """Fields of the query root type, in schema order."""
        return dict(self.graphql_schema.query_type.fields)

    def query_field(self, name: str) -> Optional[GraphQLField]:
        return self.graphql_schema.query_type.fields.get(name)

    def type_by_name(self, name: str) -> Optional[GraphQLNamedType]:
        return self.graphql_schema.get_type(name)

    def is_abstract(self, name: str) -> bool:
        type_ = self.type_by_name(name)
        return type_ is not None and is_abstract_type(type_)

    def implementors_of(self, name: str) -> list[GraphQLObjectType]:
        """
        Concrete object types behind an interface or union.

        Returns an empty list for unknown or non-abstract types.
        """
        type_ = self.type_by_name(name)
        if type_ is None or not is_abstract_type(type_):
            return []
        return list(self.graphql_schema.get_possible_types(type_))


async def load_schema(executor: QueryExecutor) -> RemoteSchema:
    """
    Introspect the remote endpoint.

    No retries here: transient failures surface to the orchestrator.

    Args:
        executor: Remote query executor

    Returns:
        RemoteSchema for the whole run

    Raises:
        SchemaLoadError: On transport/GraphQL errors or an invalid result
    """
    request = GraphQLRequest(
        query=get_introspection_query(descriptions=False),
        operation_name=INTROSPECTION_OPERATION,
    )
    try:
        data = await executor.execute(request)
    except ExecutorError as e:
        raise SchemaLoadError(f"Introspection request failed: {e}") from e

    schema = RemoteSchema.from_introspection(data)
    logger.info(f"Loaded remote schema with {len(schema.graphql_schema.type_map)} types")
    return schema
