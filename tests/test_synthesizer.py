from __future__ import annotations

import pytest
from graphql import Node, ObjectValueNode, parse, print_ast

from graphsource.core.defs import IDENTITY_FIELDS, EntityTypeDescriptor
from graphsource.core.errors import ConfigurationError, PaginationVariableMismatch
from graphsource.core.synthesizer import QuerySynthesizer, check_pagination_variables
from graphsource.core.utils import flatten_selection
from graphsource.runtime.pagination import LimitOffsetAdapter


ARTICLE = EntityTypeDescriptor(
    remote_type_name="NodeArticle",
    query_field_name="nodeQuery",
    supported_languages=("EN", "ES"),
    is_interface=True,
    interface_name="Node",
)
USER = EntityTypeDescriptor(remote_type_name="User", query_field_name="userQuery")


def _root_field(listing):
    return listing.operation.selection_set.selections[0]


def test_one_listing_query_per_language(remote_schema):
    queries = QuerySynthesizer(remote_schema).build_listing_queries(ARTICLE)

    assert [q.language for q in queries] == ["EN", "ES"]
    assert [q.operation_name for q in queries] == ["LIST_NodeArticle_EN", "LIST_NodeArticle_ES"]
    assert all(q.variable_names == ("limit", "offset") for q in queries)


def test_listing_query_shape(remote_schema):
    [query] = QuerySynthesizer(remote_schema).build_listing_queries(ARTICLE, ["ES"])
    text = query.text

    assert text.startswith("query LIST_NodeArticle_ES($limit: Int, $offset: Int)")
    assert "nodeQuery(limit: $limit, offset: $offset)" in text
    assert "entities(language: ES)" in text
    assert "..._NodeArticleId_" in text
    assert "filter" not in text


def test_identity_fragment_selects_identity_only(remote_schema):
    fragment = QuerySynthesizer(remote_schema).identity_fragment(ARTICLE)

    assert fragment.name.value == "_NodeArticleId_"
    assert fragment.type_condition.name.value == "NodeArticle"
    assert flatten_selection(fragment.selection_set) == list(IDENTITY_FIELDS)


def test_filter_mapping_is_injected(remote_schema):
    synthesizer = QuerySynthesizer(
        remote_schema,
        filters={"NodeArticle": {"conditions": [{"field": "status", "value": ["1"]}]}},
    )

    [query] = synthesizer.build_listing_queries(ARTICLE, ["EN"])
    arguments = {a.name.value: a.value for a in _root_field(query).arguments}

    assert set(arguments) == {"limit", "offset", "filter"}
    assert isinstance(arguments["filter"], ObjectValueNode)
    printed = print_ast(arguments["filter"])
    assert 'field: "status"' in printed
    assert '"1"' in printed


def test_filter_does_not_change_identity_fragment(remote_schema):
    plain = QuerySynthesizer(remote_schema).identity_fragment(ARTICLE)
    filtered = QuerySynthesizer(
        remote_schema,
        filters={"NodeArticle": {"conditions": [{"field": "type", "value": ["article"]}]}},
    ).identity_fragment(ARTICLE)

    assert print_ast(plain) == print_ast(filtered)


def test_filter_callable_receives_language(remote_schema):
    seen = []

    def filters(descriptor, language):
        seen.append((descriptor.remote_type_name, language))
        return None

    queries = QuerySynthesizer(remote_schema, filters=filters).build_listing_queries(ARTICLE)

    assert seen == [("NodeArticle", "EN"), ("NodeArticle", "ES")]
    assert all("filter" not in q.text for q in queries)


def test_filter_on_field_without_filter_argument_is_rejected(remote_schema):
    synthesizer = QuerySynthesizer(remote_schema, filters={"User": {"conditions": []}})

    with pytest.raises(ConfigurationError, match="userQuery"):
        synthesizer.build_listing_queries(USER)


def test_pagination_variables_check():
    check_pagination_variables(LimitOffsetAdapter())

    class _Reordered(LimitOffsetAdapter):
        expected_variable_names = ("offset", "limit")

    check_pagination_variables(_Reordered())

    class _Cursor(LimitOffsetAdapter):
        name = "Cursor"
        expected_variable_names = ("first", "after")

    with pytest.raises(PaginationVariableMismatch) as exc:
        check_pagination_variables(_Cursor())

    assert exc.value.adapter == "Cursor"
    assert exc.value.actual == ["first", "after"]


def _list_children(node) -> list[str]:
    """Child collections of an AST built as lists instead of tuples."""
    found = []
    for key in node.keys:
        value = getattr(node, key, None)
        if isinstance(value, list):
            found.append(f"{node.kind}.{key}")
        for child in value if isinstance(value, (list, tuple)) else (value,):
            if isinstance(child, Node):
                found.extend(_list_children(child))
    return found


def test_listing_query_ast_prints_and_reparses(remote_schema):
    synthesizer = QuerySynthesizer(remote_schema)
    [query] = synthesizer.build_listing_queries(ARTICLE, ["EN"])
    identity = synthesizer.identity_fragment(ARTICLE)

    assert _list_children(query.operation) == []
    assert _list_children(identity) == []
    assert print_ast(parse(query.text)) == query.text
    assert print_ast(identity).startswith("fragment _NodeArticleId_ on NodeArticle")
