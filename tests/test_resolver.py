from __future__ import annotations

from graphql import build_schema, introspection_from_schema

from graphsource.core.resolver import find_entity_types, query_field_entity_type
from graphsource.core.schema import RemoteSchema


def _schema(sdl: str) -> RemoteSchema:
    return RemoteSchema.from_introspection(introspection_from_schema(build_schema(sdl)))


def test_query_field_named_after_type_resolves_to_type():
    schema = _schema("""
        type Foo { entityId: String }
        type EntityQueryResult { entities: [Foo] }
        type Query { fooQuery(limit: Int, offset: Int): EntityQueryResult }
    """)

    [descriptor] = find_entity_types(schema)

    assert descriptor.query_field_name == "fooQuery"
    assert descriptor.remote_type_name == "Foo"
    assert descriptor.is_interface is False


def test_non_null_wrapped_result_still_qualifies():
    schema = _schema("""
        type TaxonomyTerm { entityId: String }
        type EntityQueryResult { entities: [TaxonomyTerm] }
        type Query { taxonomyTermQuery: EntityQueryResult! }
    """)

    assert [d.remote_type_name for d in find_entity_types(schema)] == ["TaxonomyTerm"]


def test_interfaces_expand_to_implementors(remote_schema):
    descriptors = find_entity_types(remote_schema)
    by_name = {d.remote_type_name: d for d in descriptors}

    assert set(by_name) == {"NodeArticle", "NodePage", "User"}
    assert "Node" not in by_name
    assert "Entity" not in by_name
    assert by_name["NodePage"].query_field_name == "nodeQuery"
    assert by_name["NodePage"].is_interface is True
    assert by_name["NodePage"].interface_name == "Node"
    assert by_name["User"].is_interface is False


def test_duplicate_types_keep_first_query_field(remote_schema):
    descriptors = find_entity_types(remote_schema)
    names = [d.remote_type_name for d in descriptors]

    assert names.count("NodeArticle") == 1
    article = next(d for d in descriptors if d.remote_type_name == "NodeArticle")
    assert article.query_field_name == "nodeQuery"


def test_descriptors_follow_query_field_order(remote_schema):
    fields = [d.query_field_name for d in find_entity_types(remote_schema)]

    assert fields == ["nodeQuery", "nodeQuery", "userQuery"]


def test_unrelated_fields_are_skipped(remote_schema):
    # Comment type does not exist, searchQuery returns String, route has no suffix
    assert query_field_entity_type(remote_schema, "commentQuery") is None
    assert query_field_entity_type(remote_schema, "searchQuery") is None
    assert query_field_entity_type(remote_schema, "route") is None
    assert query_field_entity_type(remote_schema, "nodeQuery") == "Node"


def test_languages_are_attached_in_order(remote_schema):
    descriptors = find_entity_types(remote_schema, ["ES", "EN"])

    assert all(d.supported_languages == ("ES", "EN") for d in descriptors)


def test_list_of_entity_query_results_does_not_qualify():
    schema = _schema("""
        type Foo { entityId: String }
        type Bar { entityId: String }
        type EntityQueryResult { entities: [Foo] }
        type Query {
          fooQuery: EntityQueryResult
          barQuery: [EntityQueryResult]
          bazQuery: [EntityQueryResult!]!
        }
    """)

    assert [d.remote_type_name for d in find_entity_types(schema)] == ["Foo"]
    assert query_field_entity_type(schema, "barQuery") is None
