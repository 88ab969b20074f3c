from __future__ import annotations

from typing import Any, Optional

import pytest
from graphql import OperationDefinitionNode, build_schema, introspection_from_schema, parse

from graphsource.core.compiler import QueryCompiler
from graphsource.core.errors import TransportError
from graphsource.core.fragments import resolve_fragments
from graphsource.core.query_types import GraphQLRequest
from graphsource.core.resolver import find_entity_types
from graphsource.core.schema import RemoteSchema
from graphsource.core.synthesizer import QuerySynthesizer
from graphsource.storage import FragmentStore


DRUPAL_SDL = """
interface Entity {
  entityId: String
  entityLabel: String
  entityLanguage: Language
}

interface Node {
  entityId: String
  title: String
}

type Language {
  id: String
  name: String
}

enum LanguageId {
  EN
  ES
}

enum QueryOperator {
  EQUAL
  NOT_EQUAL
}

input EntityQueryFilterConditionInput {
  field: String!
  value: [String]
  operator: QueryOperator
}

input EntityQueryFilterInput {
  conditions: [EntityQueryFilterConditionInput]
}

type EntityQueryResult {
  count: Int
  entities(language: LanguageId): [Entity]
}

type TextSummary {
  value: String
  format: String
}

type NodeArticle implements Entity & Node {
  entityId: String
  entityLabel: String
  entityLanguage: Language
  title: String
  body: TextSummary
  author: User
  entityTranslation(language: LanguageId!): Entity
}

type NodePage implements Entity & Node {
  entityId: String
  entityLabel: String
  entityLanguage: Language
  title: String
}

type User implements Entity {
  entityId: String
  entityLabel: String
  entityLanguage: Language
  name: String
  mail: String
}

type Query {
  nodeQuery(limit: Int = 10, offset: Int = 0, filter: EntityQueryFilterInput): EntityQueryResult
  userQuery(limit: Int, offset: Int): EntityQueryResult
  nodeArticleQuery(limit: Int, offset: Int): EntityQueryResult
  commentQuery(limit: Int, offset: Int): EntityQueryResult
  searchQuery(text: String): String
  route(path: String): String
}
"""

ENDPOINT = "https://drupal.test/graphql"


def entity(type_name: str, entity_id: int, language: str = "en", **fields: Any) -> dict:
    """Entity payload as the remote API returns it."""
    return {
        "__typename": type_name,
        "entityId": str(entity_id),
        "entityLanguage": {"id": language},
        **fields,
    }


def entities(type_name: str, count: int, language: str = "en") -> list[dict]:
    return [entity(type_name, i + 1, language, title=f"{type_name} {i + 1}") for i in range(count)]


class FakeExecutor:
    """
    Serves introspection and listing pages from memory.

    `datasets` maps operation names to every entity of that listing; pages are
    sliced with the request's limit/offset. `failures` maps operation names to
    the offset at which a TransportError is raised.
    """

    def __init__(
        self,
        introspection: dict,
        datasets: Optional[dict[str, list[dict]]] = None,
        failures: Optional[dict[str, int]] = None,
    ):
        self.introspection = introspection
        self.datasets = datasets or {}
        self.failures = failures or {}
        self.requests: list[GraphQLRequest] = []

    @property
    def operations(self) -> list[str]:
        return [r.operation_name for r in self.requests]

    async def execute(self, request: GraphQLRequest) -> dict[str, Any]:
        self.requests.append(request)
        name = request.operation_name
        if name == "IntrospectionQuery":
            return self.introspection

        offset = request.variables["offset"]
        limit = request.variables["limit"]
        if self.failures.get(name) == offset:
            raise TransportError(ENDPOINT, 503, "Service Unavailable")

        document = parse(request.query)
        operation = next(
            d for d in document.definitions
            if isinstance(d, OperationDefinitionNode) and d.name.value == name
        )
        field_name = operation.selection_set.selections[0].name.value
        items = self.datasets.get(name, [])[offset:offset + limit]
        return {field_name: {"entities": items}}


@pytest.fixture()
def introspection() -> dict:
    return introspection_from_schema(build_schema(DRUPAL_SDL))


@pytest.fixture()
def remote_schema(introspection) -> RemoteSchema:
    return RemoteSchema.from_introspection(introspection)


@pytest.fixture()
def make_executor(introspection):
    def make(datasets=None, failures=None) -> FakeExecutor:
        return FakeExecutor(introspection, datasets=datasets, failures=failures)
    return make


@pytest.fixture()
def compile_documents(remote_schema):
    """Run synthesis, fragment generation and compilation for the test schema."""
    def compile_(languages=("EN",)):
        descriptors = find_entity_types(remote_schema, languages)
        synthesizer = QuerySynthesizer(remote_schema)
        resolved = resolve_fragments(FragmentStore(), remote_schema, descriptors)
        return QueryCompiler(remote_schema).compile(
            descriptors,
            {d.remote_type_name: synthesizer.build_listing_queries(d) for d in descriptors},
            {d.remote_type_name: synthesizer.identity_fragment(d) for d in descriptors},
            resolved.fragments,
        )
    return compile_
